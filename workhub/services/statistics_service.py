# =============================================
# workhub/services/statistics_service.py
# =============================================
from typing import Dict
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from workhub.repositories.application_repository import ApplicationRepository
from workhub.repositories.job_repository import JobRepository
from workhub.schemas.application import ApplicationStatistics
from workhub.schemas.enums import ApplicationStatusEnum, JobStatusEnum
from workhub.schemas.job import EmployerJobStatistics, RecentApplication

logger = logging.getLogger(__name__)

def zero_filled(counts: Dict[str, int], statuses) -> Dict[str, int]:
    """Every known status appears, even with no rows"""
    filled = {status.value: 0 for status in statuses}
    filled.update(counts)
    return filled

class StatisticsService:
    """Dashboard aggregates, computed from the tables on every request"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.application_repo = ApplicationRepository(db)
        self.job_repo = JobRepository(db)

    async def employer_application_stats(self, employer_id: UUID) -> ApplicationStatistics:
        counts = await self.application_repo.count_by_status(employer_id=employer_id)
        unviewed = await self.application_repo.count_unviewed_for_employer(employer_id)
        return ApplicationStatistics(
            by_status=zero_filled(counts, ApplicationStatusEnum),
            total=sum(counts.values()),
            unviewed=unviewed
        )

    async def worker_application_stats(self, applicant_id: UUID) -> ApplicationStatistics:
        counts = await self.application_repo.count_by_status(applicant_id=applicant_id)
        return ApplicationStatistics(
            by_status=zero_filled(counts, ApplicationStatusEnum),
            total=sum(counts.values())
        )

    async def employer_job_stats(self, employer_id: UUID, recent_limit: int = 5) -> EmployerJobStatistics:
        rows = await self.job_repo.employer_job_totals(employer_id)
        by_status = zero_filled({status: count for status, count, _, _ in rows}, JobStatusEnum)

        recent = await self.application_repo.recent_for_employer(employer_id, limit=recent_limit)
        recent_applications = [
            RecentApplication(
                application_id=application.application_id,
                job_id=application.job_id,
                job_title=application.job.title,
                applicant_id=application.applicant_id,
                applicant_name=application.applicant.name,
                status=application.status,
                applied_at=application.applied_at
            )
            for application in recent
        ]

        return EmployerJobStatistics(
            by_status=by_status,
            total_jobs=sum(count for _, count, _, _ in rows),
            active_jobs=by_status[JobStatusEnum.ACTIVE.value],
            total_views=sum(int(views) for _, _, views, _ in rows),
            total_applications=sum(int(applications) for _, _, _, applications in rows),
            recent_applications=recent_applications
        )
