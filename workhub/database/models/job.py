# =============================================
# workhub/database/models/job.py
# =============================================
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Boolean, JSON, UUID, ForeignKey, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workhub.config.database import Base
import uuid

class Job(Base):
    __tablename__ = "jobs"

    # Primary Key
    job_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    # Basic Info
    title = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(30), nullable=False, index=True)
    subcategory = Column(String(100), nullable=True)
    job_type = Column(String(20), nullable=False)

    # Location
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False, index=True)
    pincode = Column(String(6), nullable=False)

    # Compensation
    salary_type = Column(String(20), nullable=False)
    salary_min = Column(Float, nullable=False)
    salary_max = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="INR")
    is_negotiable = Column(Boolean, nullable=False, default=False)

    # Requirements
    experience = Column(String(20), nullable=False, default="fresher")
    skills = Column(JSON, nullable=False, default=list)
    education = Column(String(30), nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    # Application settings
    application_deadline = Column(DateTime(timezone=True), nullable=True)
    max_applications = Column(Integer, nullable=True)
    current_applications = Column(Integer, nullable=False, default=0)

    # Status
    status = Column(String(20), nullable=False, default="active", index=True)
    priority = Column(String(10), nullable=False, default="medium")
    is_urgent = Column(Boolean, nullable=False, default=False)

    # Metrics
    views = Column(Integer, nullable=False, default=0)
    analytics_impressions = Column(Integer, nullable=False, default=0)
    analytics_applications = Column(Integer, nullable=False, default=0)
    analytics_hired = Column(Integer, nullable=False, default=0)

    # Search support, derived from the fields above on every write
    skills_index = Column(Text, nullable=False, default="|")
    search_keywords = Column(Text, nullable=False, default="")

    # Foreign Keys
    employer_id = Column(
        UUID(as_uuid=True),
        ForeignKey('users.user_id', ondelete='RESTRICT'),
        nullable=False,
        index=True
    )

    # Audit Fields
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_date = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __table_args__ = (
        CheckConstraint('salary_max IS NULL OR salary_min <= salary_max', name='ck_job_salary_range'),
        CheckConstraint(
            'max_applications IS NULL OR current_applications <= max_applications',
            name='ck_job_application_cap'
        ),
        Index('ix_jobs_category_status_created', 'category', 'status', 'created_date'),
        Index('ix_jobs_city_category_status', 'city', 'category', 'status'),
    )

    # =============================================
    # RELATIONSHIPS
    # =============================================

    employer = relationship("User", back_populates="jobs", lazy="select")

    applications = relationship("Application", back_populates="job", lazy="select")

    def refresh_search_fields(self):
        """Rebuild the denormalized skill index and keyword list"""
        skills = [skill.strip().lower() for skill in (self.skills or []) if skill and skill.strip()]
        self.skills_index = "|" + "".join(f"{skill}|" for skill in dict.fromkeys(skills))

        keywords = [self.title, self.category, *(self.skills or []), *(self.tags or []), self.city, self.state]
        unique_keywords = dict.fromkeys(k.strip().lower() for k in keywords if k and k.strip())
        self.search_keywords = " ".join(unique_keywords)

    def __repr__(self):
        return f"<Job(job_id={self.job_id}, title='{self.title}', status='{self.status}')>"
