"""initial schema: users, jobs, applications, application status history

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(10), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("pincode", sa.String(6), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("experience", sa.String(20), nullable=False),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("company_name", sa.String(200), nullable=True),
        sa.Column("created_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_active", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_user_id", "users", ["user_id"])
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_is_active", "users", ["is_active"])

    op.create_table(
        "jobs",
        sa.Column("job_id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("subcategory", sa.String(100), nullable=True),
        sa.Column("job_type", sa.String(20), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("pincode", sa.String(6), nullable=False),
        sa.Column("salary_type", sa.String(20), nullable=False),
        sa.Column("salary_min", sa.Float(), nullable=False),
        sa.Column("salary_max", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("is_negotiable", sa.Boolean(), nullable=False),
        sa.Column("experience", sa.String(20), nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("education", sa.String(30), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("application_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_applications", sa.Integer(), nullable=True),
        sa.Column("current_applications", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("is_urgent", sa.Boolean(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("analytics_impressions", sa.Integer(), nullable=False),
        sa.Column("analytics_applications", sa.Integer(), nullable=False),
        sa.Column("analytics_hired", sa.Integer(), nullable=False),
        sa.Column("skills_index", sa.Text(), nullable=False),
        sa.Column("search_keywords", sa.Text(), nullable=False),
        sa.Column("employer_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_date", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("salary_max IS NULL OR salary_min <= salary_max", name="ck_job_salary_range"),
        sa.CheckConstraint(
            "max_applications IS NULL OR current_applications <= max_applications",
            name="ck_job_application_cap"
        ),
    )
    op.create_index("ix_jobs_job_id", "jobs", ["job_id"])
    op.create_index("ix_jobs_title", "jobs", ["title"])
    op.create_index("ix_jobs_category", "jobs", ["category"])
    op.create_index("ix_jobs_city", "jobs", ["city"])
    op.create_index("ix_jobs_state", "jobs", ["state"])
    op.create_index("ix_jobs_status", "jobs", ["status"])
    op.create_index("ix_jobs_employer_id", "jobs", ["employer_id"])
    op.create_index("ix_jobs_category_status_created", "jobs", ["category", "status", "created_date"])
    op.create_index("ix_jobs_city_category_status", "jobs", ["city", "category", "status"])

    op.create_table(
        "applications",
        sa.Column("application_id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("job_id", sa.UUID(as_uuid=True), sa.ForeignKey("jobs.job_id", ondelete="RESTRICT"), nullable=False),
        sa.Column("applicant_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False),
        sa.Column("employer_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("proposed_salary_amount", sa.Float(), nullable=True),
        sa.Column("proposed_salary_type", sa.String(20), nullable=True),
        sa.Column("available_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("available_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("availability_flexible", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("interview_scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("interview_location", sa.String(255), nullable=True),
        sa.Column("interview_type", sa.String(20), nullable=True),
        sa.Column("interview_notes", sa.Text(), nullable=True),
        sa.Column("viewed_by_employer", sa.Boolean(), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_date", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("job_id", "applicant_id", name="uq_application_job_applicant"),
    )
    op.create_index("ix_applications_application_id", "applications", ["application_id"])
    op.create_index("ix_applications_job_id", "applications", ["job_id"])
    op.create_index("ix_applications_applicant_id", "applications", ["applicant_id"])
    op.create_index("ix_applications_employer_id", "applications", ["employer_id"])
    op.create_index("ix_applications_status", "applications", ["status"])
    op.create_index("ix_applications_applied_at", "applications", ["applied_at"])
    op.create_index("ix_applications_employer_status", "applications", ["employer_id", "status"])

    op.create_table(
        "application_status_history",
        sa.Column("history_id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "application_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("applications.application_id", ondelete="CASCADE"),
            nullable=False
        ),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("changed_by", sa.UUID(as_uuid=True), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("note", sa.String(500), nullable=True),
        sa.UniqueConstraint("application_id", "sequence", name="uq_status_history_sequence"),
    )
    op.create_index("ix_application_status_history_application_id", "application_status_history", ["application_id"])


def downgrade() -> None:
    op.drop_table("application_status_history")
    op.drop_table("applications")
    op.drop_table("jobs")
    op.drop_table("users")
