# =============================================
# workhub/repositories/user_repository.py
# =============================================
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import datetime
import logging

from workhub.database.models.user import User
from workhub.core.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_data: Dict[str, Any]) -> User:
        """Create a new user"""
        try:
            db_user = User(**user_data)
            self.db.add(db_user)
            await self.db.commit()
            await self.db.refresh(db_user)

            logger.info(f"User created successfully: {db_user.user_id}")
            return db_user

        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Integrity error creating user: {e}")
            raise ValidationError.for_field("phone", "An account with this phone already exists")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating user: {e}")
            raise DatabaseError("create user", str(e))

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[User]:
        """Get user by phone number"""
        stmt = select(User).where(User.phone == phone)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def touch_last_active(self, user_id: UUID, now: datetime) -> None:
        stmt = update(User).where(User.user_id == user_id).values(last_active=now)
        await self.db.execute(stmt.execution_options(synchronize_session=False))
        await self.db.commit()
