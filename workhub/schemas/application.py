# =============================================
# workhub/schemas/application.py
# =============================================
from pydantic import BaseModel, Field, ConfigDict, validator
from typing import Dict, List, Optional
from datetime import datetime, timezone
from uuid import UUID

from workhub.config.settings import get_settings
from workhub.schemas.common import to_utc
from workhub.schemas.enums import ApplicationStatusEnum, InterviewTypeEnum, SalaryTypeEnum

settings = get_settings()

# =============================================
# CREATE SCHEMA
# =============================================
class ApplicationCreate(BaseModel):
    """Body of an apply request; job and applicant come from the URL and token"""
    model_config = ConfigDict(use_enum_values=True)

    cover_letter: Optional[str] = Field(None, max_length=settings.COVER_LETTER_MAX_LENGTH)
    proposed_salary_amount: Optional[float] = Field(None, ge=0)
    proposed_salary_type: Optional[SalaryTypeEnum] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    availability_flexible: bool = True

    @validator('cover_letter')
    def validate_cover_letter(cls, v):
        if v is None:
            return v
        return v.strip() or None

    @validator('available_from')
    def validate_available_from(cls, v):
        return to_utc(v)

    @validator('available_until')
    def validate_availability(cls, v, values):
        v = to_utc(v)
        start = values.get('available_from')
        if v is not None and start is not None and v < start:
            raise ValueError("available_until must not be before available_from")
        return v

# =============================================
# WORKFLOW SCHEMAS
# =============================================
class ApplicationStatusUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: ApplicationStatusEnum
    note: Optional[str] = Field(None, max_length=500)

    @validator('status')
    def validate_status(cls, v):
        if v in (ApplicationStatusEnum.WITHDRAWN, ApplicationStatusEnum.WITHDRAWN.value):
            raise ValueError("Only the applicant can withdraw an application")
        return v

class ApplicationWithdraw(BaseModel):
    note: Optional[str] = Field(None, max_length=500)

class InterviewSchedule(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    scheduled_at: datetime
    location: Optional[str] = Field(None, max_length=255)
    interview_type: InterviewTypeEnum = Field(default=InterviewTypeEnum.IN_PERSON)
    notes: Optional[str] = Field(None, max_length=1000)

    @validator('scheduled_at')
    def validate_scheduled_at(cls, v):
        v = to_utc(v)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Interview must be scheduled in the future")
        return v

# =============================================
# RESPONSE SCHEMAS
# =============================================
class StatusHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    status: str
    changed_by: Optional[UUID] = None
    changed_at: datetime
    note: Optional[str] = None

class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: UUID
    job_id: UUID
    applicant_id: UUID
    employer_id: UUID
    cover_letter: Optional[str] = None
    proposed_salary_amount: Optional[float] = None
    proposed_salary_type: Optional[str] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    availability_flexible: bool
    status: str
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    interview_scheduled_at: Optional[datetime] = None
    interview_location: Optional[str] = None
    interview_type: Optional[str] = None
    interview_notes: Optional[str] = None
    viewed_by_employer: bool
    viewed_at: Optional[datetime] = None
    applied_at: datetime
    updated_date: Optional[datetime] = None

    # Related summaries
    job_title: Optional[str] = None
    job_city: Optional[str] = None
    applicant_name: Optional[str] = None
    applicant_phone: Optional[str] = None
    employer_name: Optional[str] = None
    company_name: Optional[str] = None

class ApplicationSummary(BaseModel):
    """Schema for listings"""
    model_config = ConfigDict(from_attributes=True)

    application_id: UUID
    job_id: UUID
    applicant_id: UUID
    status: str
    viewed_by_employer: bool
    applied_at: datetime
    interview_scheduled_at: Optional[datetime] = None
    job_title: Optional[str] = None
    applicant_name: Optional[str] = None

# =============================================
# STATISTICS SCHEMAS
# =============================================
class ApplicationStatistics(BaseModel):
    by_status: Dict[str, int]
    total: int
    unviewed: Optional[int] = None
