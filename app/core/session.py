from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class AuthSession(BaseModel):
    """Authenticated caller, resolved once per request from the bearer token."""

    user_id: str
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.USER
    access_token: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
