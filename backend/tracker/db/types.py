"""Column Types: storage adapters shared by the ORM models.

Invariants:
    - UTCDateTime always returns timezone-aware UTC datetimes, on every read
    - Aware values are converted to UTC before storage; naive values are taken as UTC

Design Decisions:
    - Stored as naive UTC: SQLite has no timezone column type, so text ordering
      of the stored values matches chronological order
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
