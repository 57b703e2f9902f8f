"""Contact Service: contact lifecycle and the job <-> contact relationship.

Invariants:
    - At most one job_contacts row per (job_id, contact_id); linking again rewrites
      relationship_type in place
    - delete removes the contact's job links, then the contact, in one transaction
    - Follow-up reminders only include contacts in FOLLOW_UP_CONTACT_STATUSES
    - companies_worked_with counts each company once, however many linked jobs it has

Design Decisions:
    - link_to_job is check-then-insert-or-update inside a single transaction; the
      store's BEGIN IMMEDIATE makes the check and the write one unit
"""

import logging
from datetime import date
from typing import Any, Mapping

from sqlalchemy import select

from tracker.core.domain_types import FOLLOW_UP_CONTACT_STATUSES, CompanyId, ContactId, JobId
from tracker.core.predicates import Equals, QueryBuilder
from tracker.core.tracker_stats import count_distinct
from tracker.core.validation import ValidationResult, validate_contact
from tracker.infrastructure.database import Store
from tracker.infrastructure.repository import Repository
from tracker.models import Contact, Job, JobContact
from tracker.schemas.stats import ContactStats
from tracker.services.service_helpers import Clock, follow_up_day, new_id, utcnow

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("full_name", "job_title", "location", "email", "notes")


class ContactService:
    def __init__(self, store: Store, clock: Clock = utcnow):
        self._store = store
        self._clock = clock
        self._contacts = Repository(Contact)
        self._links = Repository(JobContact)

    async def create(self, data: Mapping[str, Any]) -> Contact | ValidationResult:
        values = self._contacts.writable_values(data, exclude=("id",))
        result = self._validate(values)
        if not result.is_valid:
            return result
        contact_id = ContactId(new_id())
        async with self._store.transaction("contact.create", "Contact", contact_id) as db:
            contact = self._contacts.add(db, id=contact_id, **values)
        logger.info(
            f"Contact created: {contact.full_name}",
            extra={"entity": "Contact", "entity_id": contact_id},
        )
        return contact

    async def find_by_id(self, contact_id: ContactId) -> Contact | None:
        async with self._store.session() as db:
            return await self._contacts.find_by_id(db, contact_id)

    async def find_all(self) -> list[Contact]:
        async with self._store.session() as db:
            return await self._contacts.find_all(db, Contact.full_name.asc())

    async def find_by_company_id(self, company_id: CompanyId) -> list[Contact]:
        return await self._find(QueryBuilder().where("company_id", company_id))

    async def search(self, query: str) -> list[Contact]:
        """Substring match on name, job title, location, email, notes."""
        return await self._find(QueryBuilder().search(SEARCH_COLUMNS, query))

    async def update(
        self, contact_id: ContactId, changes: Mapping[str, Any],
    ) -> Contact | ValidationResult | None:
        updates = self._contacts.writable_values(changes, exclude=("id",))
        async with self._store.transaction("contact.update", "Contact", contact_id) as db:
            contact = await self._contacts.find_by_id(db, contact_id)
            if contact is None:
                return None
            result = self._validate({**self._contacts.as_dict(contact), **updates})
            if not result.is_valid:
                return result
            self._contacts.apply(contact, updates)
            await db.flush()
            await db.refresh(contact)
        return contact

    async def delete(self, contact_id: ContactId) -> bool:
        async with self._store.transaction("contact.delete", "Contact", contact_id) as db:
            unlinked = await self._links.delete_where(db, Equals("contact_id", contact_id))
            deleted = await self._contacts.delete_by_id(db, contact_id)
        if deleted:
            logger.info(
                f"Contact deleted with {unlinked} job link(s)",
                extra={"entity": "Contact", "entity_id": contact_id},
            )
        return deleted

    # --- Job <-> contact links ------------------------------------------------

    async def link_to_job(self, contact_id: ContactId, job_id: JobId, relationship_type: str) -> None:
        """Create the link, or rewrite its relationship_type if it already exists."""
        async with self._store.transaction("contact.link_to_job", "JobContact", contact_id) as db:
            link = await self._links.find_by_id(db, (job_id, contact_id))
            if link is None:
                self._links.add(
                    db, job_id=job_id, contact_id=contact_id,
                    relationship_type=relationship_type,
                )
            else:
                link.relationship_type = relationship_type
        logger.info(
            f"Contact linked to job {job_id} as {relationship_type}",
            extra={"entity": "Contact", "entity_id": contact_id},
        )

    async def unlink_from_job(self, contact_id: ContactId, job_id: JobId) -> bool:
        where = QueryBuilder().where("contact_id", contact_id).where("job_id", job_id)
        async with self._store.transaction("contact.unlink_from_job", "JobContact", contact_id) as db:
            return await self._links.delete_where(db, where.where_clause()) > 0

    async def get_job_relationships(self, contact_id: ContactId) -> list[JobContact]:
        spec = QueryBuilder().where("contact_id", contact_id).build()
        async with self._store.session() as db:
            return await self._links.find(db, spec)

    async def get_contacts_for_job(self, job_id: JobId) -> list[Contact]:
        stmt = (
            select(Contact)
            .join(JobContact, JobContact.contact_id == Contact.id)
            .where(JobContact.job_id == job_id)
            .order_by(Contact.full_name.asc())
        )
        async with self._store.session() as db:
            return list((await db.execute(stmt)).scalars().all())

    async def get_contacts_with_follow_ups(self, on: date | str | None = None) -> list[Contact]:
        """Active contacts whose follow-up falls on `on` (default: today)."""
        qb = (
            QueryBuilder()
            .where("follow_up_date", follow_up_day(on, self._clock))
            .where_in("status", sorted(FOLLOW_UP_CONTACT_STATUSES))
            .order_by("follow_up_date", "asc")
        )
        return await self._find(qb)

    async def get_stats(self, contact_id: ContactId) -> ContactStats:
        async with self._store.session() as db:
            job_ids = (await db.execute(
                select(JobContact.job_id).where(JobContact.contact_id == contact_id),
            )).scalars().all()
            company_ids = []
            if job_ids:
                company_ids = (await db.execute(
                    select(Job.company_id).where(Job.id.in_(job_ids)),
                )).scalars().all()
        return ContactStats(
            linked_jobs=len(job_ids),
            companies_worked_with=count_distinct(company_ids),
        )

    async def _find(self, qb: QueryBuilder) -> list[Contact]:
        spec = qb.order_by("full_name", "asc").build()
        async with self._store.session() as db:
            return await self._contacts.find(db, spec)

    def _validate(self, values: Mapping[str, Any]) -> ValidationResult:
        result = validate_contact(values)
        if not result.is_valid:
            logger.info(
                f"Contact rejected by validation: {sorted(result.fields())}",
                extra={"entity": "Contact"},
            )
        return result
