# =============================================
# workhub/api/v1/endpoints/auth.py
# =============================================
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.config.database import get_db
from workhub.core.auth import get_current_user
from workhub.database.models.user import User
from workhub.schemas.auth import OtpSendRequest, OtpSendResponse, OtpVerifyRequest, TokenResponse
from workhub.schemas.common import ApiResponse
from workhub.schemas.user import UserResponse
from workhub.services.auth_service import AuthService
from workhub.services.otp_service import OtpService, get_otp_service

# =============================================
# ROUTER AND DEPENDENCIES
# =============================================
router = APIRouter()

async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    otp_service: OtpService = Depends(get_otp_service)
) -> AuthService:
    return AuthService(db, otp_service)

# =============================================
# AUTHENTICATION ROUTES
# =============================================

@router.post("/otp/send", response_model=ApiResponse[OtpSendResponse])
async def send_otp(
    request: OtpSendRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Request a one-time password for a phone number

    - **phone**: 10-digit Indian mobile number, optionally prefixed with +91
    """
    data = await auth_service.send_otp(request.phone)
    return ApiResponse(message="OTP sent successfully", data=data)

@router.post("/otp/verify", response_model=ApiResponse[TokenResponse])
async def verify_otp(
    request: OtpVerifyRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Verify the OTP and receive an access token

    The account is created on first login; **name** is then required and
    **role** chooses between worker and employer.
    """
    data = await auth_service.verify_otp(request)
    return ApiResponse(message="Login successful", data=data)

@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return ApiResponse(data=UserResponse.model_validate(current_user))
