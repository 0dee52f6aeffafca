# =============================================
# workhub/database/models/user.py
# =============================================
from sqlalchemy import Column, String, Boolean, DateTime, JSON, UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workhub.config.database import Base
import uuid

class User(Base):
    __tablename__ = "users"

    # Primary Key
    user_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    # Basic Info
    name = Column(String(100), nullable=False)
    phone = Column(String(10), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="worker", index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Location
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    pincode = Column(String(6), nullable=True)

    # Worker profile
    skills = Column(JSON, nullable=False, default=list)
    experience = Column(String(20), nullable=False, default="fresher")
    bio = Column(String(500), nullable=True)

    # Employer profile
    company_name = Column(String(200), nullable=True)

    # Audit Fields
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_date = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
    last_active = Column(DateTime(timezone=True), nullable=True)

    # =============================================
    # RELATIONSHIPS
    # =============================================

    jobs = relationship("Job", back_populates="employer", lazy="select")

    applications = relationship(
        "Application",
        back_populates="applicant",
        foreign_keys="Application.applicant_id",
        lazy="select"
    )

    def __repr__(self):
        return f"<User(user_id={self.user_id}, name='{self.name}', role='{self.role}')>"
