# =============================================
# workhub/database/models/application.py
# =============================================
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Boolean, UUID, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workhub.config.database import Base
import uuid

class Application(Base):
    __tablename__ = "applications"

    # Primary Key
    application_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    # Foreign Keys
    job_id = Column(
        UUID(as_uuid=True),
        ForeignKey('jobs.job_id', ondelete='RESTRICT'),
        nullable=False,
        index=True
    )
    applicant_id = Column(
        UUID(as_uuid=True),
        ForeignKey('users.user_id', ondelete='RESTRICT'),
        nullable=False,
        index=True
    )
    employer_id = Column(
        UUID(as_uuid=True),
        ForeignKey('users.user_id', ondelete='RESTRICT'),
        nullable=False,
        index=True
    )

    # Application details
    cover_letter = Column(Text, nullable=True)
    proposed_salary_amount = Column(Float, nullable=True)
    proposed_salary_type = Column(String(20), nullable=True)
    available_from = Column(DateTime(timezone=True), nullable=True)
    available_until = Column(DateTime(timezone=True), nullable=True)
    availability_flexible = Column(Boolean, nullable=False, default=True)

    # Workflow
    status = Column(String(30), nullable=False, default="pending", index=True)

    # Interview details
    interview_scheduled_at = Column(DateTime(timezone=True), nullable=True)
    interview_location = Column(String(255), nullable=True)
    interview_type = Column(String(20), nullable=True)
    interview_notes = Column(Text, nullable=True)

    # Employer visibility
    viewed_by_employer = Column(Boolean, nullable=False, default=False)
    viewed_at = Column(DateTime(timezone=True), nullable=True)

    # Audit Fields
    applied_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_date = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    # Constraints
    __table_args__ = (
        UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant'),
        Index('ix_applications_employer_status', 'employer_id', 'status'),
    )

    # =============================================
    # RELATIONSHIPS
    # =============================================

    job = relationship("Job", back_populates="applications", lazy="select")
    applicant = relationship("User", back_populates="applications", foreign_keys=[applicant_id], lazy="select")
    employer = relationship("User", foreign_keys=[employer_id], lazy="select")

    status_history = relationship(
        "ApplicationStatusHistory",
        back_populates="application",
        order_by="ApplicationStatusHistory.sequence",
        lazy="selectin",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Application(application_id={self.application_id}, job_id={self.job_id}, status='{self.status}')>"


class ApplicationStatusHistory(Base):
    __tablename__ = "application_status_history"

    history_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    application_id = Column(
        UUID(as_uuid=True),
        ForeignKey('applications.application_id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # Position in the log, starting at 1
    sequence = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False)
    changed_by = Column(UUID(as_uuid=True), nullable=True)
    changed_at = Column(DateTime(timezone=True), nullable=False)
    note = Column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint('application_id', 'sequence', name='uq_status_history_sequence'),
    )

    application = relationship("Application", back_populates="status_history")

    def __repr__(self):
        return f"<ApplicationStatusHistory(application_id={self.application_id}, sequence={self.sequence}, status='{self.status}')>"
