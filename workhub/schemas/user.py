# =============================================
# workhub/schemas/user.py
# =============================================
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

class UserResponse(BaseModel):
    """Public view of an account"""
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    name: str
    phone: str
    email: Optional[str] = None
    role: str
    is_active: bool
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience: str
    company_name: Optional[str] = None
    created_date: Optional[datetime] = None
