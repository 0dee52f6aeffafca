# =============================================
# workhub/services/job_service.py
# =============================================
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from workhub.database.models.job import Job
from workhub.database.models.user import User
from workhub.repositories.job_repository import JobRepository
from workhub.schemas.common import Page
from workhub.schemas.enums import JobStatusEnum, UserRoleEnum
from workhub.schemas.job import (
    JobCreate,
    JobResponse,
    JobSearchFilters,
    JobSummary,
    JobUpdate
)
from workhub.services.job_guard import as_utc, utcnow
from workhub.core.exceptions import (
    AppException,
    DatabaseError,
    ForbiddenError,
    JobNotFoundError,
    ValidationError
)

logger = logging.getLogger(__name__)

CAP_CONSTRAINT = "ck_job_application_cap"

def to_job_response(job: Job) -> JobResponse:
    response = JobResponse.model_validate(job)
    if "employer" in job.__dict__ and job.employer is not None:
        response.employer_name = job.employer.name
        response.company_name = job.employer.company_name
    return response

class JobService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.job_repo = JobRepository(db)

    async def _get_owned_job(self, job_id: UUID, user: User) -> Job:
        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)
        if job.employer_id != user.user_id and user.role != UserRoleEnum.ADMIN.value:
            raise ForbiddenError("Only the employer who posted this job can change it")
        return job

    # =============================================
    # BASIC CRUD OPERATIONS
    # =============================================

    async def create_job(self, employer: User, job_data: JobCreate) -> JobResponse:
        try:
            job = await self.job_repo.create(job_data, employer.user_id, utcnow())
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating job: {e}")
            raise DatabaseError("create job", str(e))

        job = await self.job_repo.get_by_id(job.job_id, with_employer=True)
        return to_job_response(job)

    async def get_job(self, job_id: UUID) -> JobResponse:
        """Read a job and count the view"""
        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)

        try:
            await self.job_repo.increment_views(job_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            # View counts are best effort; the read still succeeds
            await self.db.rollback()
            logger.warning(f"Could not count view for job {job_id}: {e}")

        job = await self.job_repo.get_by_id(job_id, with_employer=True)
        return to_job_response(job)

    async def update_job(self, job_id: UUID, user: User, job_data: JobUpdate) -> JobResponse:
        job = await self._get_owned_job(job_id, user)
        update_data = job_data.model_dump(exclude_unset=True)

        errors: Dict[str, List[str]] = {}
        salary_min = update_data.get("salary_min", job.salary_min)
        salary_max = update_data.get("salary_max", job.salary_max)
        if salary_max is not None and salary_min is not None and salary_min > salary_max:
            errors.setdefault("salary_max", []).append("salary_max must be greater than or equal to salary_min")

        max_applications = update_data.get("max_applications")
        if max_applications is not None and max_applications < job.current_applications:
            errors.setdefault("max_applications", []).append(
                f"max_applications cannot be lower than the {job.current_applications} applications already received"
            )

        deadline = as_utc(update_data.get("application_deadline"))
        if "application_deadline" in update_data and deadline is not None and deadline <= utcnow():
            errors.setdefault("application_deadline", []).append("Application deadline must be in the future")

        if errors:
            raise ValidationError(errors)

        if not update_data:
            return to_job_response(await self.job_repo.get_by_id(job_id, with_employer=True))

        try:
            await self.job_repo.update(job, update_data)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if CAP_CONSTRAINT in str(e.orig):
                # The cap check lost a race with a concurrent application
                logger.warning(f"Cap lowered below applications while updating job {job_id}: {e}")
                raise ValidationError.for_field("max_applications", "max_applications is lower than the applications already received")
            logger.error(f"Integrity error updating job {job_id}: {e}")
            raise DatabaseError("update job", str(e))
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating job {job_id}: {e}")
            raise DatabaseError("update job", str(e))

        logger.info(f"Job updated successfully: {job_id}")
        return to_job_response(await self.job_repo.get_by_id(job_id, with_employer=True))

    async def change_status(self, job_id: UUID, user: User, status: str) -> JobResponse:
        await self._get_owned_job(job_id, user)
        try:
            await self.job_repo.set_status(job_id, status)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error changing status of job {job_id}: {e}")
            raise DatabaseError("change job status", str(e))

        logger.info(f"Job {job_id} status set to {status}")
        return to_job_response(await self.job_repo.get_by_id(job_id, with_employer=True))

    async def delete_job(self, job_id: UUID, user: User) -> Dict[str, str]:
        """Hard delete only when nothing references the job; otherwise cancel it"""
        await self._get_owned_job(job_id, user)
        try:
            outcome = await self.job_repo.delete_or_cancel(job_id)
        except AppException:
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error deleting job {job_id}: {e}")
            raise DatabaseError("delete job", str(e))

        status = JobStatusEnum.CANCELLED.value if outcome == "cancelled" else "deleted"
        return {"job_id": str(job_id), "outcome": outcome, "status": status}

    async def recount_applications(self, job_id: UUID) -> JobResponse:
        """Admin correction for a drifted application counter"""
        try:
            count = await self.job_repo.recount_applications(job_id)
            if count is None:
                raise JobNotFoundError(job_id)
            await self.db.commit()
        except AppException:
            raise
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Recount of job {job_id} violates its application cap: {e}")
            raise ValidationError.for_field("max_applications", "Stored applications exceed max_applications")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error recounting applications for job {job_id}: {e}")
            raise DatabaseError("recount applications", str(e))

        logger.info(f"Job {job_id} application count reset to {count}")
        return to_job_response(await self.job_repo.get_by_id(job_id, with_employer=True))

    # =============================================
    # QUERIES
    # =============================================

    async def search_jobs(
        self,
        filters: JobSearchFilters,
        viewer: Optional[User] = None,
        page: int = 1,
        limit: int = 20
    ) -> Page[JobSummary]:
        """
        Public search only sees active jobs. Another status is honoured only
        when the caller filters on their own jobs, or is an admin.
        """
        is_admin = viewer is not None and viewer.role == UserRoleEnum.ADMIN.value
        is_own_listing = viewer is not None and filters.employer_id == viewer.user_id
        if filters.status is None or not (is_admin or is_own_listing):
            filters = filters.model_copy(update={"status": JobStatusEnum.ACTIVE})

        jobs, total = await self.job_repo.search(filters, skip=(page - 1) * limit, limit=limit)
        return Page[JobSummary].build([JobSummary.model_validate(job) for job in jobs], total, page, limit)

    async def list_employer_jobs(
        self,
        employer: User,
        status: Optional[JobStatusEnum] = None,
        page: int = 1,
        limit: int = 20
    ) -> Page[JobSummary]:
        filters = JobSearchFilters(employer_id=employer.user_id, status=status)
        jobs, total = await self.job_repo.search(filters, skip=(page - 1) * limit, limit=limit)
        return Page[JobSummary].build([JobSummary.model_validate(job) for job in jobs], total, page, limit)

    async def recommend_jobs(self, worker: User, limit: int = 20) -> List[JobSummary]:
        jobs = await self.job_repo.recommend_for_worker(
            skills=worker.skills or [],
            city=worker.city,
            experience=worker.experience,
            limit=limit
        )
        return [JobSummary.model_validate(job) for job in jobs]
