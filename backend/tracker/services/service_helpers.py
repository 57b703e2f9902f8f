"""Service helpers: id allocation, the injectable clock, and follow-up date parsing."""

import uuid
from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def follow_up_day(on: date | str | None, clock: Clock) -> str:
    """Resolve a follow-up target to YYYY-MM-DD; None means today per the clock."""
    if on is None:
        return clock().date().isoformat()
    if isinstance(on, datetime):
        return on.date().isoformat()
    if isinstance(on, date):
        return on.isoformat()
    return date.fromisoformat(on).isoformat()
