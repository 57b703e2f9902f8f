"""Job Service: job lifecycle with an audited status trail, follow-ups, and stats.

Invariants:
    - create inserts the job and its first history row (old_status NULL) in one transaction
    - update writes exactly one history row when the status actually changes, before
      the job row changes, in the same transaction
    - date_saved is set on create from the service clock and never accepted from callers
    - delete removes the job's links and history through ON DELETE CASCADE
    - Follow-up reminders only include jobs in FOLLOW_UP_JOB_STATUSES

Design Decisions:
    - search ranks title matches first, then newest saved; the ranking runs in Python
      over the matched rows so the SQL stays a plain OR of substring matches
    - History sequence numbers are assigned inside the update transaction, which
      holds the writer lock, so two transitions of one job cannot share a number
"""

import logging
from datetime import date
from typing import Any, Mapping

from sqlalchemy import func, select

from tracker.core.domain_types import FOLLOW_UP_JOB_STATUSES, CompanyId, HistoryId, JobId
from tracker.core.predicates import QueryBuilder
from tracker.core.tracker_stats import compute_job_stats
from tracker.core.validation import ValidationResult, validate_job
from tracker.infrastructure.database import Store
from tracker.infrastructure.repository import Repository
from tracker.models import Job, JobStatusHistory
from tracker.schemas.filters import JobFilters
from tracker.schemas.stats import JobStats
from tracker.services.service_helpers import Clock, follow_up_day, new_id, utcnow

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("job_title", "location", "department", "notes")
IMMUTABLE_FIELDS = ("id", "date_saved")


class JobService:
    def __init__(self, store: Store, clock: Clock = utcnow):
        self._store = store
        self._clock = clock
        self._jobs = Repository(Job)
        self._history = Repository(JobStatusHistory)

    async def create(self, data: Mapping[str, Any]) -> Job | ValidationResult:
        values = self._jobs.writable_values(data, exclude=IMMUTABLE_FIELDS)
        result = self._validate(values)
        if not result.is_valid:
            return result
        job_id = JobId(new_id())
        now = self._clock()
        async with self._store.transaction("job.create", "Job", job_id) as db:
            job = self._jobs.add(db, id=job_id, date_saved=now, **values)
            await db.flush()
            self._append_history(db, job_id, None, job.status, sequence=1, changed_at=now)
        logger.info(
            f"Job created: {job.job_title} ({job.status})",
            extra={"entity": "Job", "entity_id": job_id},
        )
        return job

    async def find_by_id(self, job_id: JobId) -> Job | None:
        async with self._store.session() as db:
            return await self._jobs.find_by_id(db, job_id)

    async def find_all(self) -> list[Job]:
        async with self._store.session() as db:
            return await self._jobs.find_all(db, Job.date_saved.desc())

    async def find_by_company_id(self, company_id: CompanyId) -> list[Job]:
        return await self._find(QueryBuilder().where("company_id", company_id))

    async def find_by_status(self, status: str) -> list[Job]:
        return await self._find(QueryBuilder().where("status", status))

    async def search(self, query: str) -> list[Job]:
        """Substring match on title, location, department, notes; title hits rank first."""
        if not query or not query.strip():
            return await self.find_all()
        jobs = await self._find(QueryBuilder().search(SEARCH_COLUMNS, query))
        needle = query.lower()
        # stable sort keeps the newest-first order within each group
        return sorted(jobs, key=lambda j: needle not in j.job_title.lower())

    async def find_by_filters(self, filters: JobFilters | Mapping[str, Any]) -> list[Job]:
        if not isinstance(filters, JobFilters):
            filters = JobFilters.model_validate(filters)
        qb = QueryBuilder()
        if filters.status:
            qb.where_in("status", filters.status)
        if filters.company_id is not None:
            qb.where("company_id", filters.company_id)
        if filters.seniority_level:
            qb.where_in("seniority_level", filters.seniority_level)
        if filters.job_type:
            qb.where_in("job_type", filters.job_type)
        if filters.salary_min is not None:
            qb.where("salary_min", filters.salary_min)
        if filters.salary_max is not None:
            qb.where("salary_max", filters.salary_max)
        if filters.limit is not None:
            qb.limit(filters.limit)
        if filters.offset is not None:
            qb.offset(filters.offset)
        return await self._find(qb)

    async def update(
        self, job_id: JobId, changes: Mapping[str, Any], status_note: str | None = None,
    ) -> Job | ValidationResult | None:
        """Apply a partial update; a real status change is audited first."""
        updates = self._jobs.writable_values(changes, exclude=IMMUTABLE_FIELDS)
        async with self._store.transaction("job.update", "Job", job_id) as db:
            job = await self._jobs.find_by_id(db, job_id)
            if job is None:
                return None
            result = self._validate({**self._jobs.as_dict(job), **updates})
            if not result.is_valid:
                return result

            new_status = updates.get("status")
            if new_status is not None and new_status != job.status:
                sequence = await self._next_sequence(db, job_id)
                self._append_history(
                    db, job_id, job.status, new_status,
                    sequence=sequence, changed_at=self._clock(), notes=status_note,
                )
                await db.flush()
                logger.info(
                    f"Job status {job.status} -> {new_status}",
                    extra={"entity": "Job", "entity_id": job_id},
                )

            self._jobs.apply(job, updates)
            await db.flush()
            await db.refresh(job)
        return job

    async def delete(self, job_id: JobId) -> bool:
        async with self._store.transaction("job.delete", "Job", job_id) as db:
            deleted = await self._jobs.delete_by_id(db, job_id)
        if deleted:
            logger.info("Job deleted", extra={"entity": "Job", "entity_id": job_id})
        return deleted

    async def get_status_history(self, job_id: JobId) -> list[JobStatusHistory]:
        """Newest transition first."""
        spec = (
            QueryBuilder()
            .where("job_id", job_id)
            .order_by("changed_at", "desc")
            .order_by("sequence", "desc")
            .build()
        )
        async with self._store.session() as db:
            return await self._history.find(db, spec)

    async def get_jobs_with_follow_ups(self, on: date | str | None = None) -> list[Job]:
        """Jobs still in motion whose follow-up falls on `on` (default: today)."""
        qb = (
            QueryBuilder()
            .where("follow_up_date", follow_up_day(on, self._clock))
            .where_in("status", sorted(FOLLOW_UP_JOB_STATUSES))
            .order_by("follow_up_date", "asc")
        )
        return await self._find(qb)

    async def get_stats(self) -> JobStats:
        async with self._store.session() as db:
            rows = (await db.execute(select(Job.status, Job.excitement_level))).all()
        return JobStats(**compute_job_stats(rows))

    async def _find(self, qb: QueryBuilder) -> list[Job]:
        spec = qb.order_by("date_saved", "desc").build()
        async with self._store.session() as db:
            return await self._jobs.find(db, spec)

    async def _next_sequence(self, db, job_id: JobId) -> int:
        latest = (await db.execute(
            select(func.max(JobStatusHistory.sequence))
            .where(JobStatusHistory.job_id == job_id),
        )).scalar_one()
        return (latest or 0) + 1

    def _append_history(
        self, db, job_id: JobId, old_status: str | None, new_status: str,
        sequence: int, changed_at, notes: str | None = None,
    ) -> JobStatusHistory:
        return self._history.add(
            db,
            id=HistoryId(new_id()),
            job_id=job_id,
            old_status=old_status,
            new_status=new_status,
            changed_at=changed_at,
            sequence=sequence,
            notes=notes,
        )

    def _validate(self, values: Mapping[str, Any]) -> ValidationResult:
        result = validate_job(values)
        if not result.is_valid:
            logger.info(
                f"Job rejected by validation: {sorted(result.fields())}",
                extra={"entity": "Job"},
            )
        return result
