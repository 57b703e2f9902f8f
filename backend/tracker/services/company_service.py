"""Company Service: company lifecycle, find-or-create by name, and per-company stats.

Invariants:
    - name is unique: a colliding create/update raises UniquenessViolationError
    - delete refuses (ReferentialIntegrityError) while any job or contact references
      the company; the check and the delete run in one transaction
    - find_or_create never produces two rows for one name
    - get_stats is computed from the current rows on every call

Design Decisions:
    - find_or_create keeps `name` authoritative over caller defaults: the row it
      creates is always findable by the name it was asked for
"""

import logging
from typing import Any, Mapping

from sqlalchemy import select

from tracker.core.domain_types import DEFAULT_EXCITEMENT, CompanyId
from tracker.core.errors import ReferentialIntegrityError
from tracker.core.predicates import Equals, QueryBuilder
from tracker.core.tracker_stats import count_by_status
from tracker.core.validation import ValidationResult, validate_company
from tracker.infrastructure.database import Store
from tracker.infrastructure.repository import Repository
from tracker.models import Company, Contact, Job
from tracker.schemas.stats import CompanyStats
from tracker.services.service_helpers import Clock, new_id, utcnow

logger = logging.getLogger(__name__)

COMPANY_DEFAULTS: dict[str, Any] = {
    "industry": None,
    "size": None,
    "type": None,
    "location": None,
    "website": None,
    "linkedin_url": None,
    "year_founded": None,
    "excitement_level": DEFAULT_EXCITEMENT,
    "glassdoor_rating": None,
    "notes": None,
}

SEARCH_COLUMNS = ("name", "industry", "location", "notes")


class CompanyService:
    def __init__(self, store: Store, clock: Clock = utcnow):
        self._store = store
        self._clock = clock
        self._companies = Repository(Company)
        self._jobs = Repository(Job)
        self._contacts = Repository(Contact)

    async def create(self, data: Mapping[str, Any]) -> Company | ValidationResult:
        values = {**COMPANY_DEFAULTS, **self._companies.writable_values(data, exclude=("id",))}
        result = self._validate(values)
        if not result.is_valid:
            return result
        company_id = CompanyId(new_id())
        async with self._store.transaction("company.create", "Company", company_id) as db:
            company = self._companies.add(db, id=company_id, **values)
        logger.info(
            f"Company created: {company.name}",
            extra={"entity": "Company", "entity_id": company_id},
        )
        return company

    async def find_by_id(self, company_id: CompanyId) -> Company | None:
        async with self._store.session() as db:
            return await self._companies.find_by_id(db, company_id)

    async def find_by_name(self, name: str) -> Company | None:
        async with self._store.session() as db:
            return await self._find_by_name(db, name)

    async def find_all(self) -> list[Company]:
        async with self._store.session() as db:
            return await self._companies.find_all(db, Company.name.asc())

    async def search(self, query: str) -> list[Company]:
        """Case-insensitive substring match on name, industry, location, notes."""
        spec = QueryBuilder().search(SEARCH_COLUMNS, query).order_by("name", "asc").build()
        async with self._store.session() as db:
            return await self._companies.find(db, spec)

    async def update(
        self, company_id: CompanyId, changes: Mapping[str, Any],
    ) -> Company | ValidationResult | None:
        updates = self._companies.writable_values(changes, exclude=("id",))
        async with self._store.transaction("company.update", "Company", company_id) as db:
            company = await self._companies.find_by_id(db, company_id)
            if company is None:
                return None
            result = self._validate({**self._companies.as_dict(company), **updates})
            if not result.is_valid:
                return result
            self._companies.apply(company, updates)
            await db.flush()
            await db.refresh(company)
        return company

    async def delete(self, company_id: CompanyId) -> bool:
        async with self._store.transaction("company.delete", "Company", company_id) as db:
            if not await self._companies.exists(db, company_id):
                return False
            references = Equals("company_id", company_id)
            blocking = {
                "job(s)": await self._jobs.count(db, references),
                "contact(s)": await self._contacts.count(db, references),
            }
            if any(blocking.values()):
                logger.warning(
                    f"Refused to delete company {company_id}: {blocking}",
                    extra={"entity": "Company", "entity_id": company_id},
                )
                raise ReferentialIntegrityError("Company", company_id, blocking)
            await self._companies.delete_by_id(db, company_id)
        logger.info(
            "Company deleted", extra={"entity": "Company", "entity_id": company_id},
        )
        return True

    async def find_or_create(
        self, name: str, defaults: Mapping[str, Any] | None = None,
    ) -> Company | ValidationResult:
        """Return the company called `name`, creating it from defaults if absent."""
        overrides = self._companies.writable_values(defaults or {}, exclude=("id", "name"))
        values = {**COMPANY_DEFAULTS, **overrides, "name": name}
        async with self._store.transaction("company.find_or_create", "Company") as db:
            existing = await self._find_by_name(db, name)
            if existing is not None:
                return existing
            result = self._validate(values)
            if not result.is_valid:
                return result
            company = self._companies.add(db, id=CompanyId(new_id()), **values)
        logger.info(
            f"Company created on first reference: {name}",
            extra={"entity": "Company", "entity_id": company.id},
        )
        return company

    async def get_stats(self, company_id: CompanyId) -> CompanyStats:
        async with self._store.session() as db:
            job_rows = (await db.execute(
                select(Job.status).where(Job.company_id == company_id),
            )).all()
            total_contacts = await self._contacts.count(db, Equals("company_id", company_id))
        return CompanyStats(
            total_jobs=len(job_rows),
            total_contacts=total_contacts,
            jobs_by_status=count_by_status(job_rows),
        )

    async def _find_by_name(self, db, name: str) -> Company | None:
        spec = QueryBuilder().where("name", name).limit(1).build()
        return await self._companies.find_one(db, spec)

    def _validate(self, values: Mapping[str, Any]) -> ValidationResult:
        result = validate_company(values, today=self._clock().date())
        if not result.is_valid:
            logger.info(
                f"Company rejected by validation: {sorted(result.fields())}",
                extra={"entity": "Company"},
            )
        return result
