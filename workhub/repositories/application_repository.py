# =============================================
# workhub/repositories/application_repository.py
# =============================================
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.orm import joinedload, selectinload
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from workhub.database.models.application import Application, ApplicationStatusHistory

logger = logging.getLogger(__name__)

class ApplicationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # =============================================
    # BASIC OPERATIONS
    # =============================================

    async def add(self, application: Application) -> Application:
        """Stage a new application; a duplicate surfaces as IntegrityError on flush"""
        self.db.add(application)
        await self.db.flush()
        return application

    async def get_by_id(self, application_id: UUID) -> Optional[Application]:
        stmt = (
            select(Application)
            .where(Application.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_details(self, application_id: UUID) -> Optional[Application]:
        """Get application with job, applicant, employer and history freshly loaded"""
        stmt = (
            select(Application)
            .options(
                joinedload(Application.job),
                joinedload(Application.applicant),
                joinedload(Application.employer),
                selectinload(Application.status_history)
            )
            .where(Application.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def exists_for(self, job_id: UUID, applicant_id: UUID) -> bool:
        stmt = select(Application.application_id).where(
            Application.job_id == job_id,
            Application.applicant_id == applicant_id
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    # =============================================
    # WORKFLOW
    # =============================================

    async def transition_status(
        self,
        application_id: UUID,
        expected_status: str,
        new_status: str,
        actor_id: Optional[UUID],
        now: datetime,
        note: Optional[str] = None,
        extra_values: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Compare-and-set the status and append one history entry.

        Returns False when the stored status is no longer expected_status,
        meaning another request moved the application first.
        """
        stmt = (
            update(Application)
            .where(
                Application.application_id == application_id,
                Application.status == expected_status
            )
            .values(status=new_status, updated_date=now, **(extra_values or {}))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            return False

        last_sequence = await self.db.execute(
            select(func.coalesce(func.max(ApplicationStatusHistory.sequence), 0))
            .where(ApplicationStatusHistory.application_id == application_id)
        )
        self.db.add(ApplicationStatusHistory(
            application_id=application_id,
            sequence=last_sequence.scalar_one() + 1,
            status=new_status,
            changed_by=actor_id,
            changed_at=now,
            note=note
        ))
        await self.db.flush()
        return True

    async def mark_viewed(self, application_id: UUID, now: datetime) -> bool:
        """Set the view flag once; later calls leave viewed_at untouched"""
        stmt = (
            update(Application)
            .where(
                Application.application_id == application_id,
                Application.viewed_by_employer.is_(False)
            )
            .values(viewed_by_employer=True, viewed_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def mark_all_viewed_for_job(self, job_id: UUID, now: datetime) -> int:
        stmt = (
            update(Application)
            .where(
                Application.job_id == job_id,
                Application.viewed_by_employer.is_(False)
            )
            .values(viewed_by_employer=True, viewed_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    # =============================================
    # LISTINGS
    # =============================================

    async def _paginate(self, conditions: List[Any], options: List[Any], skip: int, limit: int) -> Tuple[List[Application], int]:
        count_stmt = select(func.count(Application.application_id)).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Application)
            .options(*options)
            .where(*conditions)
            .order_by(Application.applied_at.desc(), Application.application_id)
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.unique().scalars().all()), total

    async def list_for_applicant(
        self,
        applicant_id: UUID,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Application], int]:
        conditions = [Application.applicant_id == applicant_id]
        if status:
            conditions.append(Application.status == status)
        return await self._paginate(conditions, [joinedload(Application.job)], skip, limit)

    async def list_for_job(
        self,
        job_id: UUID,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Application], int]:
        conditions = [Application.job_id == job_id]
        if status:
            conditions.append(Application.status == status)
        return await self._paginate(
            conditions,
            [joinedload(Application.applicant), joinedload(Application.job)],
            skip,
            limit
        )

    # =============================================
    # STATISTICS
    # =============================================

    async def count_by_status(
        self,
        applicant_id: Optional[UUID] = None,
        employer_id: Optional[UUID] = None
    ) -> Dict[str, int]:
        stmt = select(Application.status, func.count(Application.application_id)).group_by(Application.status)
        if applicant_id is not None:
            stmt = stmt.where(Application.applicant_id == applicant_id)
        if employer_id is not None:
            stmt = stmt.where(Application.employer_id == employer_id)

        result = await self.db.execute(stmt)
        return {status: count for status, count in result.all()}

    async def count_unviewed_for_employer(self, employer_id: UUID) -> int:
        stmt = select(func.count(Application.application_id)).where(
            Application.employer_id == employer_id,
            Application.viewed_by_employer.is_(False)
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def recent_for_employer(self, employer_id: UUID, limit: int = 5) -> List[Application]:
        stmt = (
            select(Application)
            .options(joinedload(Application.job), joinedload(Application.applicant))
            .where(Application.employer_id == employer_id)
            .order_by(Application.applied_at.desc(), Application.application_id)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.unique().scalars().all())
