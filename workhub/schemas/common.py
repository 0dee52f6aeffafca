# =============================================
# workhub/schemas/common.py
# =============================================
from pydantic import BaseModel, Field
from typing import Generic, List, Optional, TypeVar
from datetime import datetime, timezone
import math

DataT = TypeVar("DataT")

class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope shared by every endpoint"""
    status: str = Field(default="success")
    message: str = Field(default="OK")
    data: Optional[DataT] = None

class Page(BaseModel, Generic[DataT]):
    items: List[DataT]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, items: List[DataT], total: int, page: int, limit: int) -> "Page[DataT]":
        return cls(items=items, total=total, page=page, limit=limit, pages=math.ceil(total / limit) if total else 0)

def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC"""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
