"""Tracker Stats: pure aggregate computations over already-loaded rows.

Invariants:
    - Inputs are any objects with the named attributes (ORM rows or plain records)
    - Never raises on empty input: counts default to 0, average to 0.0
    - Status keys are the persisted string values

Design Decisions:
    - Pure functions, not service methods: services load rows, these count them
    - Average rounded half-up to 2 decimals via Decimal (float round() is half-even)
"""

from collections import Counter
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

from tracker.core.domain_types import ACTIVE_JOB_STATUSES, enum_value


class _HasStatus(Protocol):
    status: str


class _ScoredJob(Protocol):
    status: str
    excitement_level: int


def count_by_status(rows: Iterable[_HasStatus]) -> dict[str, int]:
    return dict(Counter(enum_value(r.status) for r in rows))


def average_excitement(levels: Iterable[int]) -> float:
    levels = list(levels)
    if not levels:
        return 0.0
    mean = Decimal(sum(levels)) / Decimal(len(levels))
    return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_job_stats(jobs: Iterable[_ScoredJob]) -> dict:
    """Totals, active count, per-status counts and mean excitement across jobs."""
    jobs = list(jobs)
    active = {s.value for s in ACTIVE_JOB_STATUSES}
    return {
        "total_jobs": len(jobs),
        "active_jobs": sum(1 for j in jobs if enum_value(j.status) in active),
        "jobs_by_status": count_by_status(jobs),
        "average_excitement": average_excitement(j.excitement_level for j in jobs),
    }


def count_distinct(values: Iterable[str | None]) -> int:
    return len({v for v in values if v is not None})
