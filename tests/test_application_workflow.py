"""Workflow tests for applying, status transitions, withdrawal and view tracking."""
import pytest
from sqlalchemy import select, update

from conftest import create_job, create_user, days_from_now, fetch
from workhub.core.exceptions import (
    ApplicationNotFoundError,
    ConcurrentModificationError,
    DeadlinePassedError,
    DuplicateApplicationError,
    ForbiddenError,
    InsufficientPermissionsError,
    InvalidStateTransitionError,
    JobFullError,
    JobNotActiveError,
    JobNotFoundError
)
from workhub.database.models import Application, ApplicationStatusHistory, Job
from workhub.repositories.application_repository import ApplicationRepository
from workhub.schemas.application import (
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationWithdraw,
    InterviewSchedule
)
from workhub.services.application_service import ApplicationService
from workhub.services.job_guard import utcnow


@pytest.fixture
def service(service_session, hub):
    return ApplicationService(service_session, hub)


async def test_apply_creates_pending_application(service, session_factory, job, worker, employer):
    response = await service.apply_to_job(job.job_id, worker, ApplicationCreate(cover_letter="  I have 3 years experience  "))

    assert response.status == "pending"
    assert response.employer_id == employer.user_id
    assert response.cover_letter == "I have 3 years experience"
    assert response.job_title == "Plumber needed"
    assert response.company_name == "Asha Constructions"
    assert [entry.status for entry in response.status_history] == ["pending"]
    assert response.status_history[0].sequence == 1
    assert response.viewed_by_employer is False

    stored_job = await fetch(session_factory, Job, job.job_id)
    assert stored_job.current_applications == 1
    assert stored_job.analytics_applications == 1


async def test_apply_example_flow_with_duplicate(service, db_session, session_factory, employer, worker, worker_b):
    job = await create_job(db_session, employer, max_applications=5)

    await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    assert (await fetch(session_factory, Job, job.job_id)).current_applications == 1

    with pytest.raises(DuplicateApplicationError):
        await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    assert (await fetch(session_factory, Job, job.job_id)).current_applications == 1

    await service.apply_to_job(job.job_id, worker_b, ApplicationCreate())
    assert (await fetch(session_factory, Job, job.job_id)).current_applications == 2


async def test_only_workers_can_apply(service, job, employer):
    with pytest.raises(InsufficientPermissionsError):
        await service.apply_to_job(job.job_id, employer, ApplicationCreate())


async def test_role_is_checked_before_job_existence(service, employer):
    from uuid import uuid4

    with pytest.raises(InsufficientPermissionsError):
        await service.apply_to_job(uuid4(), employer, ApplicationCreate())


async def test_apply_to_missing_job(service, worker):
    from uuid import uuid4

    with pytest.raises(JobNotFoundError):
        await service.apply_to_job(uuid4(), worker, ApplicationCreate())


async def test_apply_after_deadline(service, db_session, employer, worker):
    job = await create_job(db_session, employer, application_deadline=days_from_now(-1))
    with pytest.raises(DeadlinePassedError):
        await service.apply_to_job(job.job_id, worker, ApplicationCreate())


async def test_apply_to_full_job(service, db_session, session_factory, employer, worker):
    job = await create_job(db_session, employer, max_applications=2, current_applications=2)
    with pytest.raises(JobFullError):
        await service.apply_to_job(job.job_id, worker, ApplicationCreate())

    async with session_factory() as session:
        count = (await session.execute(select(Application).where(Application.job_id == job.job_id))).all()
    assert count == []


async def test_apply_to_paused_job(service, db_session, employer, worker):
    job = await create_job(db_session, employer, status="paused")
    with pytest.raises(JobNotActiveError):
        await service.apply_to_job(job.job_id, worker, ApplicationCreate())


async def test_guard_reason_precedes_duplicate_check(service, db_session, employer, worker):
    job = await create_job(db_session, employer, max_applications=1)
    await service.apply_to_job(job.job_id, worker, ApplicationCreate())

    # The worker already applied, but the full job is reported first
    with pytest.raises(JobFullError):
        await service.apply_to_job(job.job_id, worker, ApplicationCreate())

# =============================================
# STATUS TRANSITIONS
# =============================================

async def test_employer_moves_application_and_history_grows(service, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())

    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="shortlisted"))
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="shortlisted", note="Still keen"))
    final = await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="accepted"))

    assert final.status == "accepted"
    assert [entry.status for entry in final.status_history] == ["pending", "shortlisted", "shortlisted", "accepted"]
    assert [entry.sequence for entry in final.status_history] == [1, 2, 3, 4]
    assert final.status_history[-1].status == final.status
    assert final.status_history[2].note == "Still keen"
    assert all(entry.changed_by == employer.user_id for entry in final.status_history[1:])


async def test_accepting_counts_a_hire(service, session_factory, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="accepted"))

    assert (await fetch(session_factory, Job, job.job_id)).analytics_hired == 1


@pytest.mark.parametrize("terminal", ["accepted", "rejected"])
async def test_terminal_application_cannot_change(service, job, worker, employer, terminal):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status=terminal))

    with pytest.raises(InvalidStateTransitionError):
        await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="shortlisted"))


async def test_other_employer_cannot_update(service, job, worker, other_employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    with pytest.raises(ForbiddenError):
        await service.update_status(applied.application_id, other_employer, ApplicationStatusUpdate(status="rejected"))


async def test_update_unknown_application(service, employer):
    from uuid import uuid4

    with pytest.raises(ApplicationNotFoundError):
        await service.update_status(uuid4(), employer, ApplicationStatusUpdate(status="rejected"))


async def test_stale_compare_and_set_is_rejected(service_session, session_factory, service, job, worker):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())

    repo = ApplicationRepository(service_session)
    changed = await repo.transition_status(
        applied.application_id,
        expected_status="shortlisted",
        new_status="rejected",
        actor_id=None,
        now=utcnow()
    )
    await service_session.rollback()

    assert changed is False
    stored = await fetch(session_factory, Application, applied.application_id)
    assert stored.status == "pending"

# =============================================
# WITHDRAWAL
# =============================================

async def test_worker_withdraws_pending_application(service, job, worker):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    withdrawn = await service.withdraw(applied.application_id, worker, ApplicationWithdraw(note="Found other work"))

    assert withdrawn.status == "withdrawn"
    assert withdrawn.status_history[-1].status == "withdrawn"
    assert withdrawn.status_history[-1].note == "Found other work"


async def move_to(service, application_id, employer, state):
    if state == "shortlisted":
        await service.update_status(application_id, employer, ApplicationStatusUpdate(status="shortlisted"))
    elif state == "interview-scheduled":
        await service.schedule_interview(application_id, employer, InterviewSchedule(scheduled_at=days_from_now(3)))


@pytest.mark.parametrize("state", ["pending", "shortlisted", "interview-scheduled"])
async def test_withdraw_from_every_open_state(service, job, worker, employer, state):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await move_to(service, applied.application_id, employer, state)
    before = await service.get_application(applied.application_id, worker)
    assert before.status == state

    withdrawn = await service.withdraw(applied.application_id, worker)

    assert withdrawn.status == "withdrawn"
    assert len(withdrawn.status_history) == len(before.status_history) + 1
    assert [entry.status for entry in withdrawn.status_history[-2:]] == [state, "withdrawn"]


@pytest.mark.parametrize("terminal", ["accepted", "rejected"])
async def test_withdraw_fails_after_decision(service, job, worker, employer, terminal):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status=terminal))

    with pytest.raises(InvalidStateTransitionError):
        await service.withdraw(applied.application_id, worker)

    current = await service.get_application(applied.application_id, worker)
    assert current.status == terminal
    assert len(current.status_history) == 2


async def test_withdraw_twice_fails(service, job, worker):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.withdraw(applied.application_id, worker)
    with pytest.raises(InvalidStateTransitionError):
        await service.withdraw(applied.application_id, worker)


async def test_only_applicant_can_withdraw(service, job, worker, worker_b):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    with pytest.raises(ForbiddenError):
        await service.withdraw(applied.application_id, worker_b)


async def test_withdrawal_does_not_lower_application_count(service, session_factory, job, worker):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.withdraw(applied.application_id, worker)
    assert (await fetch(session_factory, Job, job.job_id)).current_applications == 1

# =============================================
# INTERVIEWS
# =============================================

async def test_schedule_interview_sets_fields_and_status(service, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    when = days_from_now(2)

    scheduled = await service.schedule_interview(
        applied.application_id,
        employer,
        InterviewSchedule(scheduled_at=when, location="Site office", interview_type="in-person", notes="Bring tools")
    )

    assert scheduled.status == "interview-scheduled"
    assert scheduled.interview_location == "Site office"
    assert scheduled.interview_type == "in-person"
    assert scheduled.interview_notes == "Bring tools"
    assert scheduled.interview_scheduled_at is not None
    assert scheduled.status_history[-1].status == "interview-scheduled"


async def test_cannot_schedule_interview_for_withdrawn(service, session_factory, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.withdraw(applied.application_id, worker)

    with pytest.raises(InvalidStateTransitionError):
        await service.schedule_interview(
            applied.application_id, employer, InterviewSchedule(scheduled_at=days_from_now(1))
        )

    stored = await fetch(session_factory, Application, applied.application_id)
    assert stored.status == "withdrawn"
    assert stored.interview_scheduled_at is None
    assert stored.interview_location is None
    assert stored.interview_type is None
    assert stored.interview_notes is None


async def test_interview_lost_to_concurrent_update_leaves_fields_empty(service, session_factory, job, worker, employer, monkeypatch):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    load = service.application_repo.get_by_id

    async def load_then_shortlist_elsewhere(application_id):
        stale = await load(application_id)
        async with session_factory() as other:
            await other.execute(
                update(Application).where(Application.application_id == application_id).values(status="shortlisted")
            )
            await other.commit()
        return stale

    monkeypatch.setattr(service.application_repo, "get_by_id", load_then_shortlist_elsewhere)

    with pytest.raises(ConcurrentModificationError):
        await service.schedule_interview(
            applied.application_id,
            employer,
            InterviewSchedule(scheduled_at=days_from_now(1), location="Site office", notes="Bring tools")
        )

    stored = await fetch(session_factory, Application, applied.application_id)
    assert stored.status == "shortlisted"
    assert stored.interview_scheduled_at is None
    assert stored.interview_location is None
    assert stored.interview_notes is None

# =============================================
# VIEW TRACKING
# =============================================

async def test_employer_view_is_recorded_once(service, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())

    first = await service.get_application(applied.application_id, employer)
    second = await service.get_application(applied.application_id, employer)

    assert first.viewed_by_employer is True
    assert first.viewed_at is not None
    assert second.viewed_at == first.viewed_at


async def test_applicant_read_does_not_mark_viewed(service, job, worker):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    read = await service.get_application(applied.application_id, worker)
    assert read.viewed_by_employer is False


async def test_stranger_cannot_read_application(service, job, worker, worker_b, other_employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    with pytest.raises(ForbiddenError):
        await service.get_application(applied.application_id, worker_b)
    with pytest.raises(ForbiddenError):
        await service.get_application(applied.application_id, other_employer)


async def test_admin_read_does_not_mark_viewed(service, job, worker, admin):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    read = await service.get_application(applied.application_id, admin)
    assert read.viewed_by_employer is False


async def test_listing_job_applications_marks_all_viewed(service, db_session, job, worker, worker_b, employer):
    await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.apply_to_job(job.job_id, worker_b, ApplicationCreate())

    page = await service.list_job_applications(job.job_id, employer)

    assert page.total == 2
    assert all(item.viewed_by_employer for item in page.items)
    assert {item.applicant_name for item in page.items} == {"Ravi Kumar", "Sunita Devi"}


async def test_listing_requires_job_owner(service, job, other_employer):
    with pytest.raises(ForbiddenError):
        await service.list_job_applications(job.job_id, other_employer)


async def test_history_rows_are_stored_in_order(service, session_factory, job, worker, employer):
    applied = await service.apply_to_job(job.job_id, worker, ApplicationCreate())
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="shortlisted"))
    await service.update_status(applied.application_id, employer, ApplicationStatusUpdate(status="rejected"))

    async with session_factory() as session:
        rows = (await session.execute(
            select(ApplicationStatusHistory.sequence, ApplicationStatusHistory.status)
            .where(ApplicationStatusHistory.application_id == applied.application_id)
            .order_by(ApplicationStatusHistory.sequence)
        )).all()

    assert [tuple(row) for row in rows] == [(1, "pending"), (2, "shortlisted"), (3, "rejected")]
