# workhub/schemas/enums.py
from enum import Enum

class UserRoleEnum(str, Enum):
    WORKER = "worker"
    EMPLOYER = "employer"
    ADMIN = "admin"

class JobCategoryEnum(str, Enum):
    CONSTRUCTION = "construction"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    CARPENTRY = "carpentry"
    PAINTING = "painting"
    CLEANING = "cleaning"
    DELIVERY = "delivery"
    HOUSEKEEPING = "housekeeping"
    SECURITY = "security"
    GARDENING = "gardening"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    OTHER = "other"

class JobTypeEnum(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    TEMPORARY = "temporary"
    HOURLY = "hourly"

class JobStatusEnum(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class JobPriorityEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

class SalaryTypeEnum(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    FIXED = "fixed"

class ExperienceEnum(str, Enum):
    FRESHER = "fresher"
    ONE_TO_TWO = "1-2 years"
    THREE_TO_FIVE = "3-5 years"
    FIVE_PLUS = "5+ years"

class EducationEnum(str, Enum):
    NONE = "none"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    HIGHER_SECONDARY = "higher-secondary"
    GRADUATE = "graduate"
    ANY = "any"

class ApplicationStatusEnum(str, Enum):
    PENDING = "pending"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

TERMINAL_APPLICATION_STATUSES = frozenset({
    ApplicationStatusEnum.ACCEPTED,
    ApplicationStatusEnum.REJECTED,
    ApplicationStatusEnum.WITHDRAWN,
})

# Statuses an employer may set directly; withdrawal belongs to the applicant
EMPLOYER_SETTABLE_STATUSES = frozenset({
    ApplicationStatusEnum.PENDING,
    ApplicationStatusEnum.SHORTLISTED,
    ApplicationStatusEnum.INTERVIEW_SCHEDULED,
    ApplicationStatusEnum.ACCEPTED,
    ApplicationStatusEnum.REJECTED,
})

class InterviewTypeEnum(str, Enum):
    IN_PERSON = "in-person"
    PHONE = "phone"
    VIDEO = "video"

class JobSortEnum(str, Enum):
    RECENT = "recent"
    OLDEST = "oldest"
    SALARY_ASC = "salary_asc"
    SALARY_DESC = "salary_desc"
    RELEVANCE = "relevance"
