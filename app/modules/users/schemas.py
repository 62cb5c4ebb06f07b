from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.core.session import UserRole


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
