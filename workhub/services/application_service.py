# =============================================
# workhub/services/application_service.py
# =============================================
from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from workhub.database.models.application import Application, ApplicationStatusHistory
from workhub.database.models.user import User
from workhub.repositories.application_repository import ApplicationRepository
from workhub.repositories.job_repository import JobRepository
from workhub.schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    ApplicationSummary,
    ApplicationWithdraw,
    InterviewSchedule
)
from workhub.schemas.common import Page
from workhub.schemas.enums import (
    ApplicationStatusEnum,
    TERMINAL_APPLICATION_STATUSES,
    UserRoleEnum
)
from workhub.services.job_guard import can_accept_application, utcnow
from workhub.services.notification_service import NotificationHub, notification_hub
from workhub.core.exceptions import (
    AppException,
    ApplicationNotFoundError,
    ConcurrentModificationError,
    DatabaseError,
    DuplicateApplicationError,
    ForbiddenError,
    InsufficientPermissionsError,
    InvalidStateTransitionError,
    JobNotFoundError
)

logger = logging.getLogger(__name__)

TERMINAL_VALUES = {status.value for status in TERMINAL_APPLICATION_STATUSES}

def to_response(application: Application) -> ApplicationResponse:
    """Build the API view of an application loaded with its relationships"""
    response = ApplicationResponse.model_validate(application)
    if application.job is not None:
        response.job_title = application.job.title
        response.job_city = application.job.city
    if application.applicant is not None:
        response.applicant_name = application.applicant.name
        response.applicant_phone = application.applicant.phone
    if application.employer is not None:
        response.employer_name = application.employer.name
        response.company_name = application.employer.company_name
    return response

def to_summary(application: Application) -> ApplicationSummary:
    summary = ApplicationSummary.model_validate(application)
    if "job" in application.__dict__ and application.job is not None:
        summary.job_title = application.job.title
    if "applicant" in application.__dict__ and application.applicant is not None:
        summary.applicant_name = application.applicant.name
    return summary

class ApplicationService:
    """
    Application workflow: apply, status transitions, withdrawal, interview
    scheduling and employer view tracking.

    Every state change runs in one transaction on the request session. Loaded
    ORM objects expire on rollback, so ids and names needed after a failure
    are captured before the first write.
    """

    def __init__(self, db: AsyncSession, hub: NotificationHub = notification_hub):
        self.db = db
        self.hub = hub
        self.application_repo = ApplicationRepository(db)
        self.job_repo = JobRepository(db)

    # =============================================
    # APPLY
    # =============================================

    async def apply_to_job(self, job_id: UUID, applicant: User, application_data: ApplicationCreate) -> ApplicationResponse:
        """Submit an application; checks run in order role, job, availability, duplicate"""
        applicant_id = applicant.user_id
        applicant_name = applicant.name

        if applicant.role != UserRoleEnum.WORKER.value:
            raise InsufficientPermissionsError([UserRoleEnum.WORKER.value])

        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)

        now = utcnow()
        can_accept_application(job, now).raise_for_job(job)
        employer_id = job.employer_id

        application = Application(
            job_id=job_id,
            applicant_id=applicant_id,
            employer_id=employer_id,
            **application_data.model_dump(),
            status=ApplicationStatusEnum.PENDING.value,
            viewed_by_employer=False,
            applied_at=now,
            status_history=[
                ApplicationStatusHistory(
                    sequence=1,
                    status=ApplicationStatusEnum.PENDING.value,
                    changed_by=applicant_id,
                    changed_at=now,
                    note="Application submitted"
                )
            ]
        )

        try:
            await self.application_repo.add(application)

            counted = await self.job_repo.increment_application_count(job_id, now)
            if not counted:
                await self.db.rollback()
                await self._raise_rejection_reason(job_id, now)

            await self.db.commit()

        except IntegrityError as e:
            await self.db.rollback()
            if await self.application_repo.exists_for(job_id, applicant_id):
                raise DuplicateApplicationError(job_id, applicant_id)
            logger.error(f"Integrity error creating application for job {job_id}: {e}")
            raise JobNotFoundError(job_id)
        except AppException:
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating application for job {job_id}: {e}")
            raise DatabaseError("create application", str(e))

        logger.info(f"Application {application.application_id} created: user {applicant_id} applied to job {job_id}")
        self.hub.notify_new_application(employer_id, job_id, application.application_id, applicant_name, now)

        return await self._load_response(application.application_id)

    async def _raise_rejection_reason(self, job_id: UUID, now) -> None:
        """Explain why the conditional counter update matched no row"""
        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)
        can_accept_application(job, now).raise_for_job(job)
        # The job looks open again on re-read; the caller may simply retry
        raise ConcurrentModificationError("job", job_id)

    # =============================================
    # STATUS TRANSITIONS
    # =============================================

    async def _transition(
        self,
        application: Application,
        new_status: str,
        actor_id: UUID,
        note: Optional[str] = None,
        extra_values: Optional[Dict[str, Any]] = None
    ) -> ApplicationResponse:
        application_id = application.application_id
        job_id = application.job_id
        applicant_id = application.applicant_id
        current_status = application.status
        now = utcnow()

        try:
            changed = await self.application_repo.transition_status(
                application_id,
                expected_status=current_status,
                new_status=new_status,
                actor_id=actor_id,
                now=now,
                note=note,
                extra_values=extra_values
            )
            if not changed:
                await self.db.rollback()
                raise ConcurrentModificationError("application", application_id)

            if new_status == ApplicationStatusEnum.ACCEPTED.value:
                await self.job_repo.increment_hired(job_id)

            await self.db.commit()

        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"History sequence conflict on application {application_id}: {e}")
            raise ConcurrentModificationError("application", application_id)
        except AppException:
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating application {application_id}: {e}")
            raise DatabaseError("update application status", str(e))

        logger.info(f"Application {application_id} moved from {current_status} to {new_status}")
        self.hub.notify_status_changed(applicant_id, application_id, job_id, new_status, now)
        return await self._load_response(application_id)

    async def _get_owned_by_employer(self, application_id: UUID, employer: User) -> Application:
        application = await self.application_repo.get_by_id(application_id)
        if not application:
            raise ApplicationNotFoundError(application_id)
        if application.employer_id != employer.user_id:
            raise ForbiddenError("Only the employer who posted the job can manage this application")
        return application

    async def update_status(self, application_id: UUID, employer: User, status_data: ApplicationStatusUpdate) -> ApplicationResponse:
        """Employer moves an application to any non-withdrawn status"""
        actor_id = employer.user_id
        application = await self._get_owned_by_employer(application_id, employer)

        if application.status in TERMINAL_VALUES:
            raise InvalidStateTransitionError(
                application.status,
                status_data.status,
                f"Application is already {application.status} and can no longer change"
            )

        return await self._transition(application, status_data.status, actor_id, note=status_data.note)

    async def withdraw(self, application_id: UUID, applicant: User, withdraw_data: Optional[ApplicationWithdraw] = None) -> ApplicationResponse:
        """Applicant withdraws; not possible once accepted, rejected or withdrawn"""
        actor_id = applicant.user_id
        application = await self.application_repo.get_by_id(application_id)
        if not application:
            raise ApplicationNotFoundError(application_id)
        if application.applicant_id != actor_id:
            raise ForbiddenError("Only the applicant can withdraw this application")

        if application.status in TERMINAL_VALUES:
            raise InvalidStateTransitionError(
                application.status,
                ApplicationStatusEnum.WITHDRAWN.value,
                f"Cannot withdraw an application that is already {application.status}"
            )

        note = withdraw_data.note if withdraw_data else None
        return await self._transition(application, ApplicationStatusEnum.WITHDRAWN.value, actor_id, note=note or "Withdrawn by applicant")

    async def schedule_interview(self, application_id: UUID, employer: User, interview: InterviewSchedule) -> ApplicationResponse:
        """Record interview details and move to interview-scheduled in one statement"""
        actor_id = employer.user_id
        application = await self._get_owned_by_employer(application_id, employer)

        if application.status in TERMINAL_VALUES:
            raise InvalidStateTransitionError(
                application.status,
                ApplicationStatusEnum.INTERVIEW_SCHEDULED.value,
                f"Cannot schedule an interview for an application that is {application.status}"
            )

        return await self._transition(
            application,
            ApplicationStatusEnum.INTERVIEW_SCHEDULED.value,
            actor_id,
            note=f"Interview scheduled for {interview.scheduled_at.isoformat()}",
            extra_values={
                "interview_scheduled_at": interview.scheduled_at,
                "interview_location": interview.location,
                "interview_type": interview.interview_type,
                "interview_notes": interview.notes
            }
        )

    # =============================================
    # READS
    # =============================================

    async def _load_response(self, application_id: UUID) -> ApplicationResponse:
        application = await self.application_repo.get_with_details(application_id)
        if not application:
            raise ApplicationNotFoundError(application_id)
        return to_response(application)

    async def get_application(self, application_id: UUID, viewer: User) -> ApplicationResponse:
        """Applicant, owning employer or admin may read; the employer's first read marks it viewed"""
        viewer_id = viewer.user_id
        viewer_role = viewer.role

        application = await self.application_repo.get_by_id(application_id)
        if not application:
            raise ApplicationNotFoundError(application_id)

        is_employer = application.employer_id == viewer_id
        if not (is_employer or application.applicant_id == viewer_id or viewer_role == UserRoleEnum.ADMIN.value):
            raise ForbiddenError("You do not have access to this application")

        if is_employer and not application.viewed_by_employer:
            try:
                if await self.application_repo.mark_viewed(application_id, utcnow()):
                    logger.info(f"Application {application_id} viewed by employer for the first time")
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Error marking application {application_id} as viewed: {e}")
                raise DatabaseError("mark application viewed", str(e))

        return await self._load_response(application_id)

    async def list_my_applications(
        self,
        applicant: User,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Page[ApplicationSummary]:
        items, total = await self.application_repo.list_for_applicant(
            applicant.user_id, status=status, skip=(page - 1) * limit, limit=limit
        )
        return Page[ApplicationSummary].build([to_summary(a) for a in items], total, page, limit)

    async def list_job_applications(
        self,
        job_id: UUID,
        viewer: User,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Page[ApplicationSummary]:
        """Employer listing of a job's applications; marks unviewed ones as viewed"""
        viewer_id = viewer.user_id
        viewer_role = viewer.role

        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)

        is_owner = job.employer_id == viewer_id
        if not (is_owner or viewer_role == UserRoleEnum.ADMIN.value):
            raise ForbiddenError("Only the employer who posted the job can list its applications")

        if is_owner:
            try:
                marked = await self.application_repo.mark_all_viewed_for_job(job_id, utcnow())
                await self.db.commit()
                if marked:
                    logger.info(f"Marked {marked} applications of job {job_id} as viewed")
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Error marking applications of job {job_id} as viewed: {e}")
                raise DatabaseError("mark applications viewed", str(e))

        items, total = await self.application_repo.list_for_job(
            job_id, status=status, skip=(page - 1) * limit, limit=limit
        )
        return Page[ApplicationSummary].build([to_summary(a) for a in items], total, page, limit)
