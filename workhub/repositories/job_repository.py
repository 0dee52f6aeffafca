# =============================================
# workhub/repositories/job_repository.py
# =============================================
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_, func, case, exists, literal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from workhub.database.models.job import Job
from workhub.database.models.application import Application
from workhub.schemas.enums import ExperienceEnum, JobSortEnum, JobStatusEnum
from workhub.schemas.job import JobCreate, JobSearchFilters

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"urgent": 4, "high": 3, "medium": 2, "low": 1}

def like_pattern(value: str) -> str:
    """Wrap user input for a LIKE substring match, escaping wildcards"""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

class JobRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # =============================================
    # BASIC CRUD OPERATIONS
    # =============================================

    async def create(self, job_data: JobCreate, employer_id: UUID, now: datetime) -> Job:
        """Create a new job owned by the employer"""
        db_job = Job(
            **job_data.model_dump(),
            employer_id=employer_id,
            status=JobStatusEnum.ACTIVE.value,
            current_applications=0,
            created_date=now
        )
        db_job.refresh_search_fields()

        self.db.add(db_job)
        await self.db.commit()

        logger.info(f"Job created successfully: {db_job.job_id}")
        return await self.get_by_id(db_job.job_id)

    async def get_by_id(self, job_id: UUID, with_employer: bool = False) -> Optional[Job]:
        """Get job by ID, always reloading counters from the database"""
        stmt = select(Job).where(Job.job_id == job_id)
        if with_employer:
            stmt = stmt.options(joinedload(Job.employer))
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def update(self, job: Job, update_data: Dict[str, Any]) -> Job:
        """Apply a partial edit; counters are never part of update_data"""
        for field, value in update_data.items():
            setattr(job, field, value)
        job.refresh_search_fields()

        await self.db.flush()
        return job

    async def set_status(self, job_id: UUID, status: str) -> bool:
        stmt = (
            update(Job)
            .where(Job.job_id == job_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    # =============================================
    # COUNTERS
    # =============================================

    async def increment_application_count(self, job_id: UUID, now: datetime) -> bool:
        """
        Count one more application if the job still accepts it.

        The status, deadline and cap are re-checked in the same statement so
        concurrent applicants can never push the count past the cap.
        """
        stmt = (
            update(Job)
            .where(
                Job.job_id == job_id,
                Job.status == JobStatusEnum.ACTIVE.value,
                or_(Job.max_applications.is_(None), Job.current_applications < Job.max_applications),
                or_(Job.application_deadline.is_(None), Job.application_deadline >= now)
            )
            .values(
                current_applications=Job.current_applications + 1,
                analytics_applications=Job.analytics_applications + 1
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def increment_views(self, job_id: UUID) -> None:
        stmt = (
            update(Job)
            .where(Job.job_id == job_id)
            .values(views=Job.views + 1, analytics_impressions=Job.analytics_impressions + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

    async def increment_hired(self, job_id: UUID) -> None:
        stmt = (
            update(Job)
            .where(Job.job_id == job_id)
            .values(analytics_hired=Job.analytics_hired + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

    async def recount_applications(self, job_id: UUID) -> Optional[int]:
        """Reset current_applications to the number of stored applications"""
        actual = (
            select(func.count(Application.application_id))
            .where(Application.job_id == job_id)
            .scalar_subquery()
        )
        stmt = (
            update(Job)
            .where(Job.job_id == job_id)
            .values(current_applications=actual)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None

        count = await self.db.execute(select(Job.current_applications).where(Job.job_id == job_id))
        return count.scalar_one()

    # =============================================
    # DELETION
    # =============================================

    async def delete_or_cancel(self, job_id: UUID) -> str:
        """
        Delete the job only when no application references it; otherwise mark
        it cancelled. Returns "deleted" or "cancelled".
        """
        has_applications = exists().where(Application.job_id == job_id)
        stmt = (
            delete(Job)
            .where(Job.job_id == job_id, ~has_applications)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
            if result.rowcount == 1:
                logger.info(f"Job deleted: {job_id}")
                return "deleted"
        except IntegrityError as e:
            # An application was committed between the check and the delete
            await self.db.rollback()
            logger.warning(f"Job {job_id} gained an application during deletion: {e}")

        await self.set_status(job_id, JobStatusEnum.CANCELLED.value)
        await self.db.commit()
        logger.info(f"Job cancelled instead of deleted: {job_id}")
        return "cancelled"

    # =============================================
    # SEARCH
    # =============================================

    def _search_conditions(self, filters: JobSearchFilters) -> List[Any]:
        conditions = []

        if filters.status:
            conditions.append(Job.status == filters.status.value)
        if filters.category:
            conditions.append(Job.category == filters.category.value)
        if filters.job_type:
            conditions.append(Job.job_type == filters.job_type.value)
        if filters.experience:
            conditions.append(Job.experience == filters.experience.value)
        if filters.employer_id:
            conditions.append(Job.employer_id == filters.employer_id)
        if filters.city:
            conditions.append(Job.city.ilike(like_pattern(filters.city.strip()), escape="\\"))
        if filters.state:
            conditions.append(Job.state.ilike(like_pattern(filters.state.strip()), escape="\\"))

        if filters.skills:
            conditions.append(or_(*[
                Job.skills_index.like(like_pattern(f"|{skill}|"), escape="\\") for skill in filters.skills
            ]))

        if filters.salary_min is not None:
            conditions.append(func.coalesce(Job.salary_max, Job.salary_min) >= filters.salary_min)
        if filters.salary_max is not None:
            conditions.append(Job.salary_min <= filters.salary_max)

        terms = self._terms(filters.q)
        if terms:
            conditions.append(or_(*[
                or_(
                    Job.title.ilike(like_pattern(term), escape="\\"),
                    Job.description.ilike(like_pattern(term), escape="\\"),
                    Job.search_keywords.like(like_pattern(term), escape="\\")
                )
                for term in terms
            ]))

        return conditions

    @staticmethod
    def _terms(q: Optional[str]) -> List[str]:
        if not q:
            return []
        return list(dict.fromkeys(term for term in q.lower().split() if term))[:10]

    def _relevance(self, terms: List[str]):
        score = literal(0)
        for term in terms:
            pattern = like_pattern(term)
            score = score + case((Job.title.ilike(pattern, escape="\\"), 3), else_=0)
            score = score + case((Job.search_keywords.like(pattern, escape="\\"), 2), else_=0)
            score = score + case((Job.description.ilike(pattern, escape="\\"), 1), else_=0)
        return score

    def _ordering(self, sort: JobSortEnum, terms: List[str]) -> List[Any]:
        tie_break = [Job.created_date.desc(), Job.job_id]
        if sort == JobSortEnum.OLDEST:
            return [Job.created_date.asc(), Job.job_id]
        if sort == JobSortEnum.SALARY_ASC:
            return [Job.salary_min.asc(), *tie_break]
        if sort == JobSortEnum.SALARY_DESC:
            return [Job.salary_min.desc(), *tie_break]
        if sort == JobSortEnum.RELEVANCE and terms:
            return [self._relevance(terms).desc(), *tie_break]
        return tie_break

    async def search(self, filters: JobSearchFilters, skip: int = 0, limit: int = 20) -> Tuple[List[Job], int]:
        """Filtered, sorted and paginated job search"""
        conditions = self._search_conditions(filters)

        count_stmt = select(func.count(Job.job_id)).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Job)
            .where(*conditions)
            .order_by(*self._ordering(filters.sort, self._terms(filters.q)))
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def recommend_for_worker(
        self,
        skills: List[str],
        city: Optional[str],
        experience: Optional[str],
        limit: int = 20
    ) -> List[Job]:
        """Active jobs matching the worker's skills, city and experience tier"""
        conditions = [Job.status == JobStatusEnum.ACTIVE.value]

        normalized = [s.strip().lower() for s in skills or [] if s and s.strip()]
        if normalized:
            conditions.append(or_(*[
                Job.skills_index.like(like_pattern(f"|{skill}|"), escape="\\") for skill in normalized
            ]))
        if city:
            conditions.append(func.lower(Job.city) == city.strip().lower())

        tiers = {ExperienceEnum.FRESHER.value}
        if experience:
            tiers.add(experience)
        conditions.append(Job.experience.in_(sorted(tiers)))

        priority_rank = case(PRIORITY_RANK, value=Job.priority, else_=0)
        stmt = (
            select(Job)
            .where(and_(*conditions))
            .order_by(priority_rank.desc(), Job.created_date.desc(), Job.job_id)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # =============================================
    # STATISTICS
    # =============================================

    async def employer_job_totals(self, employer_id: UUID) -> List[Tuple[str, int, int, int]]:
        """(status, job count, summed views, summed applications) per status"""
        stmt = (
            select(
                Job.status,
                func.count(Job.job_id),
                func.coalesce(func.sum(Job.views), 0),
                func.coalesce(func.sum(Job.current_applications), 0)
            )
            .where(Job.employer_id == employer_id)
            .group_by(Job.status)
        )
        result = await self.db.execute(stmt)
        return [tuple(row) for row in result.all()]
