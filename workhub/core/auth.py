# =============================================
# workhub/core/auth.py
# =============================================
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable, Optional
from uuid import UUID
import logging

from workhub.config.database import get_db
from workhub.core.exceptions import AuthenticationError, InsufficientPermissionsError, InvalidTokenError
from workhub.core.security import verify_token
from workhub.database.models.user import User
from workhub.repositories.user_repository import UserRepository
from workhub.schemas.enums import UserRoleEnum

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

async def resolve_user(token: str, db: AsyncSession) -> User:
    """Turn a bearer token into an active user"""
    payload = verify_token(token)
    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise InvalidTokenError()

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return await resolve_user(credentials.credentials, db)

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None"""
    if credentials is None or not credentials.credentials:
        return None
    return await resolve_user(credentials.credentials, db)

def require_roles(*roles: UserRoleEnum) -> Callable:
    allowed = [role.value for role in roles]

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.warning(f"User {current_user.user_id} with role {current_user.role} denied, requires {allowed}")
            raise InsufficientPermissionsError(allowed)
        return current_user

    return dependency

require_worker = require_roles(UserRoleEnum.WORKER)
require_employer = require_roles(UserRoleEnum.EMPLOYER)
require_employer_or_admin = require_roles(UserRoleEnum.EMPLOYER, UserRoleEnum.ADMIN)
require_admin = require_roles(UserRoleEnum.ADMIN)
