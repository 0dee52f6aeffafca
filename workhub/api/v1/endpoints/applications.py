# =============================================
# workhub/api/v1/endpoints/applications.py
# =============================================
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from workhub.config.database import get_db
from workhub.config.settings import get_settings
from workhub.core.auth import get_current_user, require_employer, require_worker
from workhub.database.models.user import User
from workhub.schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatistics,
    ApplicationStatusUpdate,
    ApplicationSummary,
    ApplicationWithdraw,
    InterviewSchedule
)
from workhub.schemas.common import ApiResponse, Page
from workhub.schemas.enums import ApplicationStatusEnum, UserRoleEnum
from workhub.services.application_service import ApplicationService
from workhub.services.notification_service import NotificationHub, get_notification_hub
from workhub.services.statistics_service import StatisticsService

# =============================================
# ROUTER INSTANCE
# =============================================
router = APIRouter()
settings = get_settings()

# =============================================
# DEPENDENCIES
# =============================================
async def get_application_service(
    db: AsyncSession = Depends(get_db),
    hub: NotificationHub = Depends(get_notification_hub)
) -> ApplicationService:
    return ApplicationService(db, hub)

async def get_statistics_service(db: AsyncSession = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)

# =============================================
# WORKER ROUTES
# =============================================

@router.post("/jobs/{job_id}", response_model=ApiResponse[ApplicationResponse], status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: UUID,
    application_data: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service)
):
    """
    Apply to a job

    **Requires worker role.** One application per worker per job; the job
    must be active, before its deadline and below its application cap.
    """
    data = await application_service.apply_to_job(job_id, current_user, application_data)
    return ApiResponse(message="Application submitted successfully", data=data)

@router.get("/mine", response_model=ApiResponse[Page[ApplicationSummary]])
async def my_applications(
    application_status: Optional[ApplicationStatusEnum] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(require_worker),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Applications submitted by the authenticated worker, newest first"""
    data = await application_service.list_my_applications(
        current_user,
        status=application_status.value if application_status else None,
        page=page,
        limit=limit
    )
    return ApiResponse(data=data)

@router.get("/stats", response_model=ApiResponse[ApplicationStatistics])
async def application_statistics(
    current_user: User = Depends(get_current_user),
    statistics_service: StatisticsService = Depends(get_statistics_service)
):
    """Counts by status: received applications for employers, submitted ones for workers"""
    if current_user.role == UserRoleEnum.EMPLOYER.value:
        data = await statistics_service.employer_application_stats(current_user.user_id)
    else:
        data = await statistics_service.worker_application_stats(current_user.user_id)
    return ApiResponse(data=data)

@router.post("/{application_id}/withdraw", response_model=ApiResponse[ApplicationResponse])
async def withdraw_application(
    application_id: UUID,
    withdraw_data: Optional[ApplicationWithdraw] = None,
    current_user: User = Depends(require_worker),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Withdraw your application; accepted and rejected applications cannot be withdrawn"""
    data = await application_service.withdraw(application_id, current_user, withdraw_data)
    return ApiResponse(message="Application withdrawn", data=data)

# =============================================
# EMPLOYER ROUTES
# =============================================

@router.get("/jobs/{job_id}", response_model=ApiResponse[Page[ApplicationSummary]])
async def job_applications(
    job_id: UUID,
    application_status: Optional[ApplicationStatusEnum] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Applications received for one of your jobs; listing marks them as viewed"""
    data = await application_service.list_job_applications(
        job_id,
        current_user,
        status=application_status.value if application_status else None,
        page=page,
        limit=limit
    )
    return ApiResponse(data=data)

@router.patch("/{application_id}/status", response_model=ApiResponse[ApplicationResponse])
async def update_application_status(
    application_id: UUID,
    status_data: ApplicationStatusUpdate,
    current_user: User = Depends(require_employer),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Move an application through the hiring workflow"""
    data = await application_service.update_status(application_id, current_user, status_data)
    return ApiResponse(message="Application status updated", data=data)

@router.post("/{application_id}/interview", response_model=ApiResponse[ApplicationResponse])
async def schedule_interview(
    application_id: UUID,
    interview: InterviewSchedule,
    current_user: User = Depends(require_employer),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Schedule an interview; the application moves to interview-scheduled"""
    data = await application_service.schedule_interview(application_id, current_user, interview)
    return ApiResponse(message="Interview scheduled", data=data)

# =============================================
# SHARED ROUTES
# =============================================

@router.get("/{application_id}", response_model=ApiResponse[ApplicationResponse])
async def get_application(
    application_id: UUID,
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service)
):
    """Get an application; the employer's first read marks it as viewed"""
    data = await application_service.get_application(application_id, current_user)
    return ApiResponse(data=data)
