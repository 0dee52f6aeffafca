"""Job editing, status changes, deletion substitution, views and recount."""
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from conftest import create_job, fetch
from workhub.core.exceptions import DatabaseError, ForbiddenError, JobNotFoundError, ValidationError
from workhub.database.models import Job
from workhub.schemas.application import ApplicationCreate
from workhub.schemas.job import JobCreate, JobUpdate
from workhub.services.application_service import ApplicationService
from workhub.services.job_service import JobService


@pytest.fixture
def job_service(service_session):
    return JobService(service_session)


@pytest.fixture
def application_service(service_session, hub):
    return ApplicationService(service_session, hub)


def job_payload(**overrides):
    values = {
        "title": "Electrician for wiring",
        "description": "Complete house wiring for a new building",
        "category": "electrical",
        "job_type": "contract",
        "address": "Plot 7, Baner",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411045",
        "salary_type": "fixed",
        "salary_min": 15000,
        "salary_max": 20000,
        "skills": ["Wiring", "wiring", " Safety "],
        "tags": ["urgent"],
    }
    values.update(overrides)
    return JobCreate(**values)


async def test_create_job_starts_active_with_search_fields(job_service, session_factory, employer):
    created = await job_service.create_job(employer, job_payload())

    assert created.status == "active"
    assert created.current_applications == 0
    assert created.skills == ["Wiring", "wiring", "Safety"]
    assert created.employer_name == "Asha Builders"

    stored = await fetch(session_factory, Job, created.job_id)
    assert stored.skills_index == "|wiring|safety|"
    assert "electrician for wiring" in stored.search_keywords
    assert "pune" in stored.search_keywords.split(" ")


async def test_get_job_counts_views(job_service, session_factory, job):
    await job_service.get_job(job.job_id)
    viewed = await job_service.get_job(job.job_id)

    assert viewed.views == 2
    assert viewed.analytics_impressions == 2


async def test_get_missing_job(job_service):
    from uuid import uuid4

    with pytest.raises(JobNotFoundError):
        await job_service.get_job(uuid4())


async def test_update_refreshes_search_fields(job_service, session_factory, job, employer):
    updated = await job_service.update_job(job.job_id, employer, JobUpdate(title="Senior plumber", skills=["Pipe fitting"]))

    assert updated.title == "Senior plumber"
    stored = await fetch(session_factory, Job, job.job_id)
    assert stored.skills_index == "|pipe fitting|"
    assert "senior plumber" in stored.search_keywords


async def test_update_rejects_inverted_salary_range(job_service, job, employer):
    with pytest.raises(ValidationError) as exc_info:
        await job_service.update_job(job.job_id, employer, JobUpdate(salary_min=5000))
    assert "salary_max" in exc_info.value.errors


async def test_cap_cannot_drop_below_received_applications(job_service, application_service, db_session, employer, worker, worker_b):
    job = await create_job(db_session, employer, max_applications=5)
    await application_service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await application_service.apply_to_job(job.job_id, worker_b, ApplicationCreate())

    with pytest.raises(ValidationError) as exc_info:
        await job_service.update_job(job.job_id, employer, JobUpdate(max_applications=1))
    assert "max_applications" in exc_info.value.errors

    lowered = await job_service.update_job(job.job_id, employer, JobUpdate(max_applications=2))
    assert lowered.max_applications == 2


async def test_cap_constraint_race_maps_to_max_applications(job_service, job, employer, monkeypatch):
    violation = IntegrityError("UPDATE jobs", {}, Exception("CHECK constraint failed: ck_job_application_cap"))
    monkeypatch.setattr(job_service.job_repo, "update", AsyncMock(side_effect=violation))

    with pytest.raises(ValidationError) as exc_info:
        await job_service.update_job(job.job_id, employer, JobUpdate(max_applications=3))
    assert "max_applications" in exc_info.value.errors


async def test_other_integrity_errors_are_not_reported_as_cap(job_service, session_factory, job, employer, monkeypatch):
    violation = IntegrityError("UPDATE jobs", {}, Exception("NOT NULL constraint failed: jobs.title"))
    monkeypatch.setattr(job_service.job_repo, "update", AsyncMock(side_effect=violation))

    with pytest.raises(DatabaseError):
        await job_service.update_job(job.job_id, employer, JobUpdate(description="Fix all leaking taps"))

    stored = await fetch(session_factory, Job, job.job_id)
    assert stored.title == job.title


async def test_only_owner_can_edit(job_service, job, other_employer):
    with pytest.raises(ForbiddenError):
        await job_service.update_job(job.job_id, other_employer, JobUpdate(title="Hijacked"))


async def test_admin_can_change_any_job_status(job_service, job, admin):
    paused = await job_service.change_status(job.job_id, admin, "paused")
    assert paused.status == "paused"

# =============================================
# DELETION
# =============================================

async def test_delete_without_applications_removes_job(job_service, session_factory, job, employer):
    outcome = await job_service.delete_job(job.job_id, employer)

    assert outcome["outcome"] == "deleted"
    assert await fetch(session_factory, Job, job.job_id) is None


async def test_delete_with_applications_cancels_instead(job_service, application_service, session_factory, job, employer, worker):
    await application_service.apply_to_job(job.job_id, worker, ApplicationCreate())

    outcome = await job_service.delete_job(job.job_id, employer)

    assert outcome == {"job_id": str(job.job_id), "outcome": "cancelled", "status": "cancelled"}
    stored = await fetch(session_factory, Job, job.job_id)
    assert stored is not None
    assert stored.status == "cancelled"


async def test_delete_requires_owner(job_service, job, other_employer):
    with pytest.raises(ForbiddenError):
        await job_service.delete_job(job.job_id, other_employer)

# =============================================
# RECOUNT
# =============================================

async def test_recount_repairs_drifted_counter(job_service, application_service, session_factory, job, worker):
    await application_service.apply_to_job(job.job_id, worker, ApplicationCreate())

    async with session_factory() as session:
        await session.execute(update(Job).where(Job.job_id == job.job_id).values(current_applications=7))
        await session.commit()

    repaired = await job_service.recount_applications(job.job_id)
    assert repaired.current_applications == 1


async def test_recount_unknown_job(job_service):
    from uuid import uuid4

    with pytest.raises(JobNotFoundError):
        await job_service.recount_applications(uuid4())
