# =============================================
# workhub/schemas/auth.py
# =============================================
from pydantic import BaseModel, ConfigDict, EmailStr, Field, validator
from typing import List, Optional
import re

from workhub.schemas.enums import ExperienceEnum, UserRoleEnum
from workhub.schemas.user import UserResponse

PHONE_PATTERN = re.compile(r'^[6-9]\d{9}$')

def normalize_phone(v: str) -> str:
    """Accept an optional +91 prefix and spaces, keep the ten digits"""
    digits = re.sub(r'[\s-]', '', v or '')
    if digits.startswith('+91'):
        digits = digits[3:]
    if not PHONE_PATTERN.match(digits):
        raise ValueError("Phone must be a valid 10-digit Indian mobile number")
    return digits

# =============================================
# OTP SCHEMAS
# =============================================
class OtpSendRequest(BaseModel):
    phone: str = Field(..., description="10-digit mobile number")

    @validator('phone')
    def validate_phone(cls, v):
        return normalize_phone(v)

class OtpSendResponse(BaseModel):
    phone: str
    expires_in: int = Field(..., description="Seconds until the code expires")
    otp: Optional[str] = Field(None, description="Only returned in debug mode")

class OtpVerifyRequest(BaseModel):
    """Verify a code; profile fields are only used when the account is created"""
    model_config = ConfigDict(use_enum_values=True)

    phone: str
    otp: str = Field(..., min_length=4, max_length=8)
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    role: UserRoleEnum = Field(default=UserRoleEnum.WORKER)
    email: Optional[EmailStr] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience: ExperienceEnum = Field(default=ExperienceEnum.FRESHER)
    company_name: Optional[str] = Field(None, max_length=200)

    @validator('phone')
    def validate_phone(cls, v):
        return normalize_phone(v)

    @validator('otp')
    def validate_otp(cls, v):
        if not v.isdigit():
            raise ValueError("OTP must contain only digits")
        return v

    @validator('role')
    def validate_role(cls, v):
        if v == UserRoleEnum.ADMIN or v == UserRoleEnum.ADMIN.value:
            raise ValueError("Admin accounts cannot be self-registered")
        return v

    @validator('pincode')
    def validate_pincode(cls, v):
        if v is not None and not re.match(r'^\d{6}$', v):
            raise ValueError("Pincode must be 6 digits")
        return v

    @validator('skills')
    def validate_skills(cls, v):
        return list(dict.fromkeys(s.strip() for s in v if s and s.strip()))

class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    is_new_user: bool = False
    user: UserResponse
