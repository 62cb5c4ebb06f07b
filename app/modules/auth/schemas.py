from pydantic import BaseModel, EmailStr, Field, StringConstraints
from typing import Annotated, List, Optional

from app.core.session import UserRole

DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.USER
    households: List[str] = []


class RegisterRequest(BaseModel):
    name: DisplayName
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    name: str
    message: str


class SessionResponse(BaseModel):
    user_id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    households: List[str] = []


class SetRoleRequest(BaseModel):
    user_id: str
    role: UserRole
