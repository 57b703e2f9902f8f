"""Store tests: schema lifecycle, transactions, and database error mapping.

Tests cover:
    - create_schema / verify_integrity / health_check
    - Commit on normal exit, rollback on exception
    - UNIQUE -> UniquenessViolationError, FK / CHECK -> ConstraintViolationError
    - translate_integrity_error message classification
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, text

from tracker.core.errors import (
    ConstraintViolationError, DatabaseError, ErrorContext, UniquenessViolationError,
)
from tracker.db.types import UTCDateTime
from tracker.infrastructure.database import Store, translate_integrity_error
from tracker.models import Company, Job


def _job_row(job_id: str, company_id: str) -> Job:
    return Job(
        id=job_id, job_title="Engineer", company_id=company_id,
        job_type="full-time", seniority_level="mid", location="Remote",
        date_saved=datetime(2024, 1, 15, tzinfo=timezone.utc),
        status="saved", excitement_level=3, source="linkedin",
    )


# --- Schema lifecycle -----------------------------------------------------------

async def test_verify_integrity_passes_after_create(store):
    await store.verify_integrity()


async def test_verify_integrity_reports_missing_tables(tmp_path):
    empty = Store(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(DatabaseError) as exc_info:
            await empty.verify_integrity()
        assert "Missing required tables" in exc_info.value.message
        assert "job_status_history" in exc_info.value.message
        assert exc_info.value.operation == "verify"
    finally:
        await empty.dispose()


async def test_drop_schema_then_verify_fails(store):
    await store.drop_schema()
    with pytest.raises(DatabaseError):
        await store.verify_integrity()


async def test_health_check(store):
    assert await store.health_check() is True


async def test_foreign_keys_enforced_on_every_connection(store):
    async with store.session() as db:
        assert (await db.execute(text("PRAGMA foreign_keys"))).scalar_one() == 1


# --- Transactions ---------------------------------------------------------------

async def test_transaction_commits(store):
    async with store.transaction("test.insert") as db:
        db.add(Company(id="c-1", name="Acme", excitement_level=3))
    async with store.session() as db:
        assert (await db.get(Company, "c-1")).name == "Acme"


async def test_transaction_rolls_back_on_exception(store):
    with pytest.raises(RuntimeError):
        async with store.transaction("test.insert") as db:
            db.add(Company(id="c-1", name="Acme", excitement_level=3))
            await db.flush()
            raise RuntimeError("boom")
    async with store.session() as db:
        assert await db.get(Company, "c-1") is None


async def test_rollback_undoes_every_write_in_the_unit(store):
    with pytest.raises(ConstraintViolationError):
        async with store.transaction("test.pair") as db:
            db.add(Company(id="c-1", name="Acme", excitement_level=3))
            await db.flush()
            db.add(_job_row("j-1", "missing-company"))
            await db.flush()
    async with store.session() as db:
        assert (await db.execute(select(Company))).scalars().all() == []


# --- Error mapping --------------------------------------------------------------

async def test_duplicate_name_raises_uniqueness_violation(store):
    async with store.transaction("test.insert") as db:
        db.add(Company(id="c-1", name="Acme", excitement_level=3))
    with pytest.raises(UniquenessViolationError) as exc_info:
        async with store.transaction("company.create", "Company", "c-2") as db:
            db.add(Company(id="c-2", name="Acme", excitement_level=3))
    err = exc_info.value
    assert err.field == "name"
    assert err.context.operation == "company.create"
    assert err.context.entity_id == "c-2"


async def test_missing_company_raises_constraint_violation(store):
    with pytest.raises(ConstraintViolationError) as exc_info:
        async with store.transaction("job.create", "Job", "j-1") as db:
            db.add(_job_row("j-1", "no-such-company"))
    assert exc_info.value.code == "CONSTRAINT_VIOLATION"
    assert exc_info.value.operation == "job.create"


async def test_check_constraint_raises_constraint_violation(store):
    with pytest.raises(ConstraintViolationError):
        async with store.transaction("test.insert") as db:
            db.add(Company(id="c-1", name="Acme", excitement_level=9))


async def test_operational_error_becomes_database_error(store):
    with pytest.raises(DatabaseError):
        async with store.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))


def test_translate_unique_message():
    ctx = ErrorContext(operation="company.update", entity="Company")
    err = translate_integrity_error(
        "UNIQUE constraint failed: companies.name", "company.update", ctx,
    )
    assert isinstance(err, UniquenessViolationError)
    assert err.field == "name"


def test_translate_unique_message_without_entity_uses_table():
    err = translate_integrity_error(
        "UNIQUE constraint failed: companies.name", "x", ErrorContext(),
    )
    assert err.context.entity == "companies"


def test_translate_foreign_key_message():
    err = translate_integrity_error(
        "FOREIGN KEY constraint failed", "company.delete", ErrorContext(),
    )
    assert isinstance(err, ConstraintViolationError)
    assert "FOREIGN KEY" in err.message


# --- Column types ---------------------------------------------------------------

def test_utc_datetime_stores_utc_and_reads_aware():
    column_type = UTCDateTime()
    local = datetime(2024, 1, 15, 11, 0, tzinfo=timezone(timedelta(hours=2)))

    stored = column_type.process_bind_param(local, None)
    loaded = column_type.process_result_value(stored, None)

    assert stored == datetime(2024, 1, 15, 9, 0)
    assert loaded == local
    assert loaded.tzinfo is timezone.utc
    assert column_type.process_bind_param(None, None) is None
