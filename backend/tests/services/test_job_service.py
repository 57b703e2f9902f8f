"""Job Service: verifies the audited status trail, search ranking, filters, follow-ups.

Invariants:
    - Every created job has exactly one initial history row (old_status NULL)
    - Each real status change appends one row; no-op updates append none
    - Deleting a job leaves no links and no history behind
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from tests.factories import TickingClock, company_data, contact_data, job_data
from tracker.core.domain_types import JobStatus
from tracker.core.errors import ConstraintViolationError
from tracker.core.validation import ValidationResult
from tracker.models import Job, JobContact, JobStatusHistory
from tracker.schemas.filters import JobFilters
from tracker.services.company_service import CompanyService
from tracker.services.job_service import JobService


async def _count(store, model, job_id: str) -> int:
    async with store.session() as db:
        return (await db.execute(
            select(func.count()).select_from(model).where(model.job_id == job_id),
        )).scalar_one()


# --- Create / read --------------------------------------------------------------

async def test_create_records_initial_history(jobs, company):
    job = await jobs.create(job_data(company.id, status="saved"))

    history = await jobs.get_status_history(job.id)

    assert len(history) == 1
    assert history[0].old_status is None
    assert history[0].new_status == "saved"
    assert history[0].sequence == 1


async def test_create_sets_date_saved_from_clock(jobs, company, clock):
    before = clock.current
    job = await jobs.create(job_data(company.id, date_saved="1999-01-01"))
    assert job.date_saved == before


async def test_create_accepts_enum_members(jobs, company):
    job = await jobs.create(job_data(company.id, status=JobStatus.PHONE_SCREEN))
    assert (await jobs.find_by_id(job.id)).status == "phone-screen"


async def test_create_invalid_returns_result_and_writes_nothing(jobs, company):
    result = await jobs.create(job_data(company.id, excitement_level=0, salary_min=5, salary_max=1))
    assert isinstance(result, ValidationResult)
    assert result.fields() == {"excitement_level", "salary_max"}
    assert await jobs.find_all() == []


async def test_create_for_unknown_company_raises(jobs):
    with pytest.raises(ConstraintViolationError):
        await jobs.create(job_data("no-such-company"))
    assert await jobs.find_all() == []


async def test_find_all_newest_first(jobs, company):
    first = await jobs.create(job_data(company.id, job_title="First"))
    second = await jobs.create(job_data(company.id, job_title="Second"))
    assert [j.id for j in await jobs.find_all()] == [second.id, first.id]


async def test_find_by_company_and_status(jobs, companies, company):
    other = await companies.create(company_data(name="Other"))
    mine = await jobs.create(job_data(company.id, status="applied"))
    await jobs.create(job_data(other.id, status="saved"))

    assert [j.id for j in await jobs.find_by_company_id(company.id)] == [mine.id]
    assert [j.id for j in await jobs.find_by_status("applied")] == [mine.id]
    assert await jobs.find_by_status(JobStatus.OFFER) == []


# --- Search ---------------------------------------------------------------------

async def test_search_ranks_title_matches_first(jobs, company):
    by_notes = await jobs.create(job_data(company.id, job_title="Engineer", notes="python heavy"))
    by_title = await jobs.create(job_data(company.id, job_title="Python Developer"))
    await jobs.create(job_data(company.id, job_title="Designer"))

    found = await jobs.search("Python")

    assert [j.id for j in found] == [by_title.id, by_notes.id]


async def test_search_matches_location_and_department(jobs, company):
    await jobs.create(job_data(company.id, location="Lisbon"))
    await jobs.create(job_data(company.id, department="Platform"))
    assert len(await jobs.search("lisbon")) == 1
    assert len(await jobs.search("PLATFORM")) == 1


async def test_blank_search_returns_all(jobs, company):
    await jobs.create(job_data(company.id))
    await jobs.create(job_data(company.id))
    assert len(await jobs.search("")) == 2


# --- Filters --------------------------------------------------------------------

async def test_filters_combine_with_and(jobs, company):
    match = await jobs.create(job_data(company.id, status="applied", seniority_level="senior"))
    await jobs.create(job_data(company.id, status="applied", seniority_level="junior"))
    await jobs.create(job_data(company.id, status="saved", seniority_level="senior"))

    found = await jobs.find_by_filters(JobFilters(status=["applied"], seniority_level=["senior"]))

    assert [j.id for j in found] == [match.id]


async def test_filter_list_matches_any(jobs, company):
    await jobs.create(job_data(company.id, job_type="contract"))
    await jobs.create(job_data(company.id, job_type="freelance"))
    await jobs.create(job_data(company.id, job_type="full-time"))
    found = await jobs.find_by_filters({"job_type": ["contract", "freelance"]})
    assert {j.job_type for j in found} == {"contract", "freelance"}


async def test_filter_salary_zero_is_a_real_filter(jobs, company):
    unpaid = await jobs.create(job_data(company.id, salary_min=0))
    await jobs.create(job_data(company.id, salary_min=50_000))
    found = await jobs.find_by_filters({"salary_min": 0})
    assert [j.id for j in found] == [unpaid.id]


async def test_empty_filters_return_everything(jobs, company):
    await jobs.create(job_data(company.id))
    await jobs.create(job_data(company.id))
    assert len(await jobs.find_by_filters({"status": [], "company_id": None})) == 2


async def test_filters_paging(jobs, company):
    created = [await jobs.create(job_data(company.id, job_title=f"Job {i}")) for i in range(5)]
    page = await jobs.find_by_filters(JobFilters(limit=2, offset=1))
    # newest first
    assert [j.id for j in page] == [created[3].id, created[2].id]


def test_filters_reject_unknown_keys():
    with pytest.raises(ValueError):
        JobFilters.model_validate({"colour": "red"})


# --- Update / status history ----------------------------------------------------

async def test_status_chain_builds_history(jobs, company):
    job = await jobs.create(job_data(company.id, status="saved"))
    await jobs.update(job.id, {"status": "applied"})
    await jobs.update(job.id, {"status": "phone-screen"}, status_note="Recruiter call booked")

    history = await jobs.get_status_history(job.id)

    assert [(h.old_status, h.new_status) for h in history] == [
        ("applied", "phone-screen"),
        ("saved", "applied"),
        (None, "saved"),
    ]
    assert [h.sequence for h in history] == [3, 2, 1]
    assert history[0].notes == "Recruiter call booked"


async def test_update_same_status_adds_no_history(jobs, company):
    job = await jobs.create(job_data(company.id, status="saved"))
    await jobs.update(job.id, {"status": "saved", "notes": "still deciding"})
    assert len(await jobs.get_status_history(job.id)) == 1


async def test_update_without_status_adds_no_history(jobs, company):
    job = await jobs.create(job_data(company.id))
    updated = await jobs.update(job.id, {"excitement_level": 5})
    assert updated.excitement_level == 5
    assert len(await jobs.get_status_history(job.id)) == 1


async def test_update_invalid_leaves_job_and_history_untouched(jobs, company):
    job = await jobs.create(job_data(company.id, status="saved"))
    result = await jobs.update(job.id, {"status": "applied", "excitement_level": 11})
    assert isinstance(result, ValidationResult)
    assert (await jobs.find_by_id(job.id)).status == "saved"
    assert len(await jobs.get_status_history(job.id)) == 1


async def test_update_cannot_touch_immutable_fields(jobs, company):
    job = await jobs.create(job_data(company.id))
    updated = await jobs.update(job.id, {"id": "other", "date_saved": "2000-01-01", "notes": "n"})
    assert updated.id == job.id
    assert updated.notes == "n"


async def test_update_missing_returns_none(jobs):
    assert await jobs.update("missing", {"status": "applied"}) is None


async def test_applied_scenario(companies, jobs):
    acme = await companies.create({"name": "Acme"})
    job = await jobs.create({
        "job_title": "Engineer",
        "company_id": acme.id,
        "status": "saved",
        "excitement_level": 4,
        "location": "Remote",
        "job_type": "full-time",
        "seniority_level": "mid",
        "source": "linkedin",
    })

    updated = await jobs.update(job.id, {"status": "applied", "date_applied": "2024-01-20"})

    assert updated.status == "applied"
    assert updated.date_applied == "2024-01-20"
    history = await jobs.get_status_history(job.id)
    assert {(h.old_status, h.new_status) for h in history} == {(None, "saved"), ("saved", "applied")}
    assert len(history) == 2


# --- Delete ---------------------------------------------------------------------

async def test_delete_cascades_links_and_history(store, jobs, contacts, company):
    job = await jobs.create(job_data(company.id))
    await jobs.update(job.id, {"status": "applied"})
    contact = await contacts.create(contact_data())
    await contacts.link_to_job(contact.id, job.id, "recruiter")

    assert await jobs.delete(job.id) is True

    assert await jobs.find_by_id(job.id) is None
    assert await _count(store, JobContact, job.id) == 0
    assert await _count(store, JobStatusHistory, job.id) == 0
    assert await contacts.find_by_id(contact.id) is not None


async def test_delete_missing_returns_false(jobs):
    assert await jobs.delete("missing") is False


# --- Follow-ups and stats -------------------------------------------------------

async def test_follow_ups_only_in_motion_statuses(jobs, company):
    due = await jobs.create(job_data(company.id, status="applied", follow_up_date="2024-01-15"))
    await jobs.create(job_data(company.id, status="saved", follow_up_date="2024-01-15"))
    await jobs.create(job_data(company.id, status="rejected", follow_up_date="2024-01-15"))
    await jobs.create(job_data(company.id, status="applied", follow_up_date="2024-01-16"))

    found = await jobs.get_jobs_with_follow_ups()

    assert [j.id for j in found] == [due.id]


async def test_follow_ups_for_given_day(jobs, company):
    due = await jobs.create(job_data(company.id, status="final-interview", follow_up_date="2024-03-01"))
    assert [j.id for j in await jobs.get_jobs_with_follow_ups(date(2024, 3, 1))] == [due.id]
    assert [j.id for j in await jobs.get_jobs_with_follow_ups("2024-03-01")] == [due.id]


async def test_stats(jobs, company):
    await jobs.create(job_data(company.id, status="saved", excitement_level=5))
    await jobs.create(job_data(company.id, status="applied", excitement_level=4))
    await jobs.create(job_data(company.id, status="rejected", excitement_level=1))

    stats = await jobs.get_stats()

    assert stats.total_jobs == 3
    assert stats.active_jobs == 2
    assert stats.jobs_by_status == {"saved": 1, "applied": 1, "rejected": 1}
    assert stats.average_excitement == 3.33


async def test_stats_empty(jobs):
    stats = await jobs.get_stats()
    assert stats.total_jobs == 0
    assert stats.average_excitement == 0.0


async def test_job_row_count_after_create(store, jobs, company):
    await jobs.create(job_data(company.id))
    async with store.session() as db:
        assert (await db.execute(select(func.count()).select_from(Job))).scalar_one() == 1


# --- Timestamps -----------------------------------------------------------------

async def test_reread_timestamps_stay_utc_aware(jobs, company):
    job = await jobs.create(job_data(company.id))
    await jobs.update(job.id, {"status": "applied"})

    again = await jobs.find_by_id(job.id)
    history = await jobs.get_status_history(job.id)

    assert again.date_saved.tzinfo is not None
    assert again.date_saved == job.date_saved
    assert all(h.changed_at.tzinfo is not None for h in history)
    assert history[-1].changed_at == job.date_saved


async def test_non_utc_clock_stored_as_utc_instant(store):
    plus_two = timezone(timedelta(hours=2))
    clock = TickingClock(start=datetime(2024, 1, 15, 11, 0, tzinfo=plus_two))
    company = await CompanyService(store, clock).create(company_data())
    job = await JobService(store, clock).create(job_data(company.id))

    again = await JobService(store, clock).find_by_id(job.id)

    assert again.date_saved.utcoffset() == timedelta(0)
    assert again.date_saved == job.date_saved
    assert again.date_saved.hour == 9


# --- Atomicity ------------------------------------------------------------------

def _failing_history(*args, **kwargs):
    raise RuntimeError("history write failed")


async def test_create_rolls_back_job_when_history_fails(jobs, company, monkeypatch):
    monkeypatch.setattr(JobService, "_append_history", _failing_history)

    with pytest.raises(RuntimeError):
        await jobs.create(job_data(company.id))

    assert await jobs.find_all() == []


async def test_update_keeps_status_when_history_fails(store, jobs, company, monkeypatch):
    job = await jobs.create(job_data(company.id, status="saved"))
    monkeypatch.setattr(JobService, "_append_history", _failing_history)

    with pytest.raises(RuntimeError):
        await jobs.update(job.id, {"status": "applied", "notes": "sent CV"})

    again = await jobs.find_by_id(job.id)
    assert again.status == "saved"
    assert again.notes is None
    assert await _count(store, JobStatusHistory, job.id) == 1


async def test_ids_are_allocated_uuid4(jobs, company):
    job = await jobs.create(job_data(company.id, id="caller-chosen"))
    history = await jobs.get_status_history(job.id)

    for ident in (company.id, job.id, history[0].id):
        assert uuid.UUID(ident).version == 4
