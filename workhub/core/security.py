# =============================================
# workhub/core/security.py
# =============================================
"""Security utilities for authentication and authorization"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import secrets

from jose import ExpiredSignatureError, JWTError, jwt

from workhub.config.settings import get_settings
from workhub.core.exceptions import InvalidTokenError, TokenExpiredError

# Get settings
settings = get_settings()

# =============================================
# JWT TOKEN MANAGEMENT
# =============================================

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

def create_user_token(user_id: Any, role: str) -> str:
    """Create the access token issued after a successful OTP login"""
    return create_access_token({"sub": str(user_id), "role": role})

def verify_token(token: str) -> Dict[str, Any]:
    """Verify and decode a JWT token"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidTokenError()

    return payload

# =============================================
# SECURITY UTILITIES
# =============================================

def generate_numeric_code(length: int = 6) -> str:
    """Generate a numeric code (for OTP, etc.)"""
    return ''.join(secrets.choice('0123456789') for _ in range(length))

def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    return secrets.compare_digest(a.encode(), b.encode())
