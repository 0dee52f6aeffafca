# =============================================
# workhub/api/v1/endpoints/jobs.py
# =============================================
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional
from uuid import UUID

from workhub.config.database import get_db
from workhub.config.settings import get_settings
from workhub.core.auth import get_optional_user, require_admin, require_employer, require_employer_or_admin, require_worker
from workhub.database.models.user import User
from workhub.schemas.common import ApiResponse, Page
from workhub.schemas.enums import (
    ExperienceEnum,
    JobCategoryEnum,
    JobSortEnum,
    JobStatusEnum,
    JobTypeEnum
)
from workhub.schemas.job import (
    EmployerJobStatistics,
    JobCreate,
    JobResponse,
    JobSearchFilters,
    JobStatusUpdate,
    JobSummary,
    JobUpdate
)
from workhub.services.job_service import JobService
from workhub.services.statistics_service import StatisticsService

# =============================================
# ROUTER INSTANCE
# =============================================
router = APIRouter()
settings = get_settings()

# =============================================
# DEPENDENCIES
# =============================================
async def get_job_service(db: AsyncSession = Depends(get_db)) -> JobService:
    return JobService(db)

async def get_statistics_service(db: AsyncSession = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)

# =============================================
# SEARCH AND LISTINGS
# =============================================

@router.get("", response_model=ApiResponse[Page[JobSummary]])
async def search_jobs(
    q: Optional[str] = Query(None, max_length=200, description="Free text search"),
    category: Optional[JobCategoryEnum] = Query(None),
    city: Optional[str] = Query(None, description="City substring"),
    state: Optional[str] = Query(None, description="State substring"),
    job_type: Optional[JobTypeEnum] = Query(None),
    experience: Optional[ExperienceEnum] = Query(None),
    skills: Optional[str] = Query(None, description="Comma separated skills; any match counts"),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    employer_id: Optional[UUID] = Query(None),
    job_status: Optional[JobStatusEnum] = Query(None, alias="status", description="Only honoured for your own jobs"),
    sort: JobSortEnum = Query(JobSortEnum.RECENT),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: Optional[User] = Depends(get_optional_user),
    job_service: JobService = Depends(get_job_service)
):
    """
    Search jobs with combinable filters

    Results are ordered by **sort** with ties broken by newest first, so
    pages never overlap. Anonymous and foreign searches only see active jobs.
    """
    filters = JobSearchFilters(
        q=q,
        status=job_status,
        category=category,
        city=city,
        state=state,
        job_type=job_type,
        experience=experience,
        skills=skills.split(",") if skills else [],
        salary_min=salary_min,
        salary_max=salary_max,
        employer_id=employer_id,
        sort=sort
    )
    data = await job_service.search_jobs(filters, viewer=current_user, page=page, limit=limit)
    return ApiResponse(data=data)

@router.get("/recommended", response_model=ApiResponse[List[JobSummary]])
async def recommended_jobs(
    current_user: User = Depends(require_worker),
    job_service: JobService = Depends(get_job_service)
):
    """Active jobs matching the worker's skills, city and experience"""
    data = await job_service.recommend_jobs(current_user, limit=settings.RECOMMENDATION_LIMIT)
    return ApiResponse(data=data)

@router.get("/mine", response_model=ApiResponse[Page[JobSummary]])
async def my_jobs(
    job_status: Optional[JobStatusEnum] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(require_employer),
    job_service: JobService = Depends(get_job_service)
):
    """Jobs posted by the authenticated employer, in every status"""
    data = await job_service.list_employer_jobs(current_user, status=job_status, page=page, limit=limit)
    return ApiResponse(data=data)

@router.get("/stats", response_model=ApiResponse[EmployerJobStatistics])
async def job_statistics(
    current_user: User = Depends(require_employer),
    statistics_service: StatisticsService = Depends(get_statistics_service)
):
    """Job counts by status, summed views and applications, latest applications"""
    data = await statistics_service.employer_job_stats(current_user.user_id)
    return ApiResponse(data=data)

# =============================================
# JOB CRUD ROUTES
# =============================================

@router.post("", response_model=ApiResponse[JobResponse], status_code=status.HTTP_201_CREATED)
async def create_job(
    job_data: JobCreate,
    current_user: User = Depends(require_employer),
    job_service: JobService = Depends(get_job_service)
):
    """Post a new job; it starts active"""
    data = await job_service.create_job(current_user, job_data)
    return ApiResponse(message="Job created successfully", data=data)

@router.get("/{job_id}", response_model=ApiResponse[JobResponse])
async def get_job(
    job_id: UUID,
    job_service: JobService = Depends(get_job_service)
):
    """Get a job by ID; every read counts as a view"""
    data = await job_service.get_job(job_id)
    return ApiResponse(data=data)

@router.put("/{job_id}", response_model=ApiResponse[JobResponse])
async def update_job(
    job_id: UUID,
    job_data: JobUpdate,
    current_user: User = Depends(require_employer_or_admin),
    job_service: JobService = Depends(get_job_service)
):
    """Edit a job; max_applications cannot drop below applications received"""
    data = await job_service.update_job(job_id, current_user, job_data)
    return ApiResponse(message="Job updated successfully", data=data)

@router.patch("/{job_id}/status", response_model=ApiResponse[JobResponse])
async def change_job_status(
    job_id: UUID,
    status_data: JobStatusUpdate,
    current_user: User = Depends(require_employer_or_admin),
    job_service: JobService = Depends(get_job_service)
):
    """Set the job status (draft, active, paused, closed, cancelled, completed)"""
    data = await job_service.change_status(job_id, current_user, status_data.status)
    return ApiResponse(message="Job status updated", data=data)

@router.delete("/{job_id}", response_model=ApiResponse[Dict[str, str]])
async def delete_job(
    job_id: UUID,
    current_user: User = Depends(require_employer_or_admin),
    job_service: JobService = Depends(get_job_service)
):
    """
    Delete a job

    A job that already has applications is cancelled instead of deleted.
    """
    data = await job_service.delete_job(job_id, current_user)
    message = "Job deleted successfully" if data["outcome"] == "deleted" else "Job has applications and was cancelled instead"
    return ApiResponse(message=message, data=data)

@router.post("/{job_id}/recount", response_model=ApiResponse[JobResponse])
async def recount_job_applications(
    job_id: UUID,
    current_user: User = Depends(require_admin),
    job_service: JobService = Depends(get_job_service)
):
    """Admin correction: reset the application counter to the stored applications"""
    data = await job_service.recount_applications(job_id)
    return ApiResponse(message="Application count recalculated", data=data)
