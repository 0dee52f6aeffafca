# =============================================
# workhub/api/v1/router.py
# =============================================
from fastapi import APIRouter

from workhub.api.v1.endpoints import (
    applications,
    auth,
    jobs,
    notifications
)

# =============================================
# API V1 ROUTER
# =============================================
api_router = APIRouter()

# =============================================
# AUTHENTICATION ROUTES
# =============================================
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Invalid OTP"},
        401: {"description": "Unauthorized"}
    }
)

# =============================================
# JOB ROUTES
# =============================================
api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["Jobs"],
    responses={
        403: {"description": "Not the job owner"},
        404: {"description": "Job not found"}
    }
)

# =============================================
# APPLICATION ROUTES
# =============================================
api_router.include_router(
    applications.router,
    prefix="/applications",
    tags=["Job Applications"],
    responses={
        404: {"description": "Application not found"},
        409: {"description": "Duplicate application, job full, deadline passed or invalid transition"}
    }
)

# =============================================
# REAL-TIME ROUTES
# =============================================
api_router.include_router(
    notifications.router,
    prefix="/ws",
    tags=["Notifications"]
)
