# =============================================
# workhub/services/otp_service.py
# =============================================
from typing import Optional
import logging

from workhub.config.settings import get_settings
from workhub.core.exceptions import InvalidOtpError
from workhub.core.otp_store import OtpStore, build_otp_store
from workhub.core.security import constant_time_compare, generate_numeric_code

logger = logging.getLogger(__name__)
settings = get_settings()

class OtpService:
    """Issues and verifies phone one-time passwords against an expiring store"""

    def __init__(
        self,
        store: OtpStore,
        ttl_seconds: int = settings.OTP_TTL_SECONDS,
        max_attempts: int = settings.OTP_MAX_ATTEMPTS,
        code_length: int = settings.OTP_LENGTH,
        mock_code: Optional[str] = settings.MOCK_OTP
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.max_attempts = max_attempts
        self.code_length = code_length
        self.mock_code = mock_code

    async def send_otp(self, phone: str) -> str:
        """Generate and store a code; delivery over SMS happens outside this service"""
        code = self.mock_code or generate_numeric_code(self.code_length)
        await self.store.save(phone, code, self.ttl_seconds)
        logger.info(f"OTP issued for phone ending {phone[-4:]}")
        return code

    async def verify_otp(self, phone: str, code: str) -> None:
        record = await self.store.get(phone)
        if record is None:
            raise InvalidOtpError("OTP has expired or was never requested")

        if record.attempts >= self.max_attempts:
            await self.store.delete(phone)
            raise InvalidOtpError("Too many failed attempts. Please request a new OTP", attempts_remaining=0)

        if not constant_time_compare(record.code, code):
            attempts = await self.store.register_failed_attempt(phone)
            remaining = max(self.max_attempts - attempts, 0)
            if remaining == 0:
                await self.store.delete(phone)
            logger.warning(f"Wrong OTP for phone ending {phone[-4:]}, {remaining} attempts left")
            raise InvalidOtpError("Invalid OTP", attempts_remaining=remaining)

        await self.store.delete(phone)

# =============================================
# STORE SINGLETON
# =============================================

_otp_store: Optional[OtpStore] = None

def get_otp_store() -> OtpStore:
    global _otp_store
    if _otp_store is None:
        _otp_store = build_otp_store(settings.OTP_BACKEND, settings.REDIS_URL)
    return _otp_store

async def close_otp_store() -> None:
    global _otp_store
    if _otp_store is not None:
        await _otp_store.close()
        _otp_store = None

def get_otp_service() -> OtpService:
    """Dependency returning an OTP service bound to the shared store"""
    return OtpService(get_otp_store())
