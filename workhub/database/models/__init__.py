# =============================================
# workhub/database/models/__init__.py
# =============================================
"""
Database Models Package

Imports every model so it is registered on Base.metadata and picked up by
Alembic autogenerate.
"""

from .user import User
from .job import Job
from .application import Application, ApplicationStatusHistory

__all__ = [
    "User",
    "Job",
    "Application",
    "ApplicationStatusHistory"
]
