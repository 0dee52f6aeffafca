# =============================================
# workhub/schemas/job.py
# =============================================
from pydantic import BaseModel, Field, ConfigDict, validator
from typing import Dict, List, Optional
from datetime import datetime, timezone
from uuid import UUID
import re

from workhub.schemas.common import to_utc
from workhub.schemas.enums import (
    EducationEnum,
    ExperienceEnum,
    JobCategoryEnum,
    JobPriorityEnum,
    JobSortEnum,
    JobStatusEnum,
    JobTypeEnum,
    SalaryTypeEnum
)

def clean_list(values: List[str]) -> List[str]:
    """Strip blanks and duplicates, keeping first-seen order"""
    return list(dict.fromkeys(v.strip() for v in values if v and v.strip()))

# =============================================
# BASE SCHEMA
# =============================================
class JobBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=100, description="Job title")
    description: str = Field(..., min_length=1, max_length=2000, description="Job description")
    category: JobCategoryEnum
    subcategory: Optional[str] = Field(None, max_length=100)
    job_type: JobTypeEnum

    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., description="6-digit postal code")

    salary_type: SalaryTypeEnum
    salary_min: float = Field(..., ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    is_negotiable: bool = False

    experience: ExperienceEnum = Field(default=ExperienceEnum.FRESHER)
    skills: List[str] = Field(default_factory=list)
    education: Optional[EducationEnum] = None
    tags: List[str] = Field(default_factory=list)

    application_deadline: Optional[datetime] = None
    max_applications: Optional[int] = Field(None, ge=1)
    priority: JobPriorityEnum = Field(default=JobPriorityEnum.MEDIUM)
    is_urgent: bool = False

    @validator('title', 'description', 'address', 'city', 'state')
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

    @validator('pincode')
    def validate_pincode(cls, v):
        if not re.match(r'^\d{6}$', v):
            raise ValueError("Pincode must be 6 digits")
        return v

    @validator('salary_max')
    def validate_salary_range(cls, v, values):
        salary_min = values.get('salary_min')
        if v is not None and salary_min is not None and v < salary_min:
            raise ValueError("salary_max must be greater than or equal to salary_min")
        return v

    @validator('skills', 'tags')
    def validate_lists(cls, v):
        return clean_list(v)

    @validator('currency')
    def validate_currency(cls, v):
        return v.upper()

# =============================================
# CREATE SCHEMA
# =============================================
class JobCreate(JobBase):
    """Schema for posting a job"""

    @validator('application_deadline')
    def validate_deadline(cls, v):
        if v is None:
            return v
        v = to_utc(v)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Application deadline must be in the future")
        return v

# =============================================
# UPDATE SCHEMA
# =============================================
class JobUpdate(BaseModel):
    """Partial job edit; range checks against stored values happen in the service"""
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    category: Optional[JobCategoryEnum] = None
    subcategory: Optional[str] = Field(None, max_length=100)
    job_type: Optional[JobTypeEnum] = None
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    pincode: Optional[str] = None
    salary_type: Optional[SalaryTypeEnum] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    is_negotiable: Optional[bool] = None
    experience: Optional[ExperienceEnum] = None
    skills: Optional[List[str]] = None
    education: Optional[EducationEnum] = None
    tags: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None
    max_applications: Optional[int] = Field(None, ge=1)
    priority: Optional[JobPriorityEnum] = None
    is_urgent: Optional[bool] = None

    @validator(
        'title', 'description', 'category', 'job_type', 'address', 'city', 'state', 'pincode',
        'salary_type', 'salary_min', 'is_negotiable', 'experience', 'skills', 'tags', 'priority', 'is_urgent'
    )
    def validate_not_null(cls, v):
        # Omit a field to keep it; these columns cannot be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @validator('title', 'description', 'address', 'city', 'state')
    def validate_not_blank(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

    @validator('pincode')
    def validate_pincode(cls, v):
        if v is not None and not re.match(r'^\d{6}$', v):
            raise ValueError("Pincode must be 6 digits")
        return v

    @validator('skills', 'tags')
    def validate_lists(cls, v):
        return clean_list(v) if v is not None else v

    @validator('application_deadline')
    def validate_deadline(cls, v):
        return to_utc(v)

class JobStatusUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: JobStatusEnum

# =============================================
# RESPONSE SCHEMAS
# =============================================
class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: UUID
    employer_id: UUID
    title: str
    description: str
    category: str
    subcategory: Optional[str] = None
    job_type: str
    address: str
    city: str
    state: str
    pincode: str
    salary_type: str
    salary_min: float
    salary_max: Optional[float] = None
    currency: str
    is_negotiable: bool
    experience: str
    skills: List[str] = Field(default_factory=list)
    education: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    application_deadline: Optional[datetime] = None
    max_applications: Optional[int] = None
    current_applications: int
    status: str
    priority: str
    is_urgent: bool
    views: int
    analytics_impressions: int
    analytics_applications: int
    analytics_hired: int
    created_date: datetime
    updated_date: Optional[datetime] = None

    # Employer summary
    employer_name: Optional[str] = None
    company_name: Optional[str] = None

class JobSummary(BaseModel):
    """Schema for listings"""
    model_config = ConfigDict(from_attributes=True)

    job_id: UUID
    employer_id: UUID
    title: str
    category: str
    job_type: str
    city: str
    state: str
    salary_type: str
    salary_min: float
    salary_max: Optional[float] = None
    experience: str
    skills: List[str] = Field(default_factory=list)
    status: str
    priority: str
    is_urgent: bool
    current_applications: int
    max_applications: Optional[int] = None
    application_deadline: Optional[datetime] = None
    views: int
    created_date: datetime

# =============================================
# SEARCH FILTERS SCHEMA
# =============================================
class JobSearchFilters(BaseModel):
    q: Optional[str] = Field(None, max_length=200, description="Free text over title, description and keywords")
    status: Optional[JobStatusEnum] = None
    category: Optional[JobCategoryEnum] = None
    city: Optional[str] = None
    state: Optional[str] = None
    job_type: Optional[JobTypeEnum] = None
    experience: Optional[ExperienceEnum] = None
    skills: List[str] = Field(default_factory=list)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    employer_id: Optional[UUID] = None
    sort: JobSortEnum = Field(default=JobSortEnum.RECENT)

    @validator('skills')
    def validate_skills(cls, v):
        return clean_list([s.lower() for s in v if s])

# =============================================
# STATISTICS SCHEMAS
# =============================================
class RecentApplication(BaseModel):
    application_id: UUID
    job_id: UUID
    job_title: str
    applicant_id: UUID
    applicant_name: str
    status: str
    applied_at: datetime

class EmployerJobStatistics(BaseModel):
    by_status: Dict[str, int]
    total_jobs: int
    active_jobs: int
    total_views: int
    total_applications: int
    recent_applications: List[RecentApplication] = Field(default_factory=list)
