# =============================================
# workhub/services/auth_service.py
# =============================================
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from workhub.config.settings import get_settings
from workhub.core.exceptions import AuthenticationError, ValidationError
from workhub.core.security import create_user_token
from workhub.repositories.user_repository import UserRepository
from workhub.schemas.auth import OtpSendResponse, OtpVerifyRequest, TokenResponse
from workhub.schemas.user import UserResponse
from workhub.services.job_guard import utcnow
from workhub.services.otp_service import OtpService

logger = logging.getLogger(__name__)
settings = get_settings()

class AuthService:
    """Phone login: OTP verification, first-login registration and token issue"""

    def __init__(self, db: AsyncSession, otp_service: OtpService):
        self.db = db
        self.otp_service = otp_service
        self.user_repo = UserRepository(db)

    async def send_otp(self, phone: str) -> OtpSendResponse:
        code = await self.otp_service.send_otp(phone)
        return OtpSendResponse(
            phone=phone,
            expires_in=self.otp_service.ttl_seconds,
            otp=code if settings.DEBUG and not settings.is_production else None
        )

    async def verify_otp(self, request: OtpVerifyRequest) -> TokenResponse:
        user = await self.user_repo.get_by_phone(request.phone)
        is_new_user = user is None
        if is_new_user and not request.name:
            raise ValidationError.for_field("name", "Name is required to create an account")

        await self.otp_service.verify_otp(request.phone, request.otp)

        if is_new_user:
            user = await self.user_repo.create({
                "name": request.name.strip(),
                "phone": request.phone,
                "email": request.email,
                "role": request.role,
                "city": request.city,
                "state": request.state,
                "pincode": request.pincode,
                "skills": request.skills,
                "experience": request.experience,
                "company_name": request.company_name
            })
            logger.info(f"New {user.role} registered: {user.user_id}")
        elif not user.is_active:
            raise AuthenticationError("Account is deactivated")

        await self.user_repo.touch_last_active(user.user_id, utcnow())
        user = await self.user_repo.get_by_id(user.user_id)

        return TokenResponse(
            access_token=create_user_token(user.user_id, user.role),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            is_new_user=is_new_user,
            user=UserResponse.model_validate(user)
        )
