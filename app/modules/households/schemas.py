from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from app.modules.tasks.schemas import TaskResponse
from app.modules.comments.schemas import CommentResponse

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
PHONE_PATTERN = r"^\+?[1-9][\d\s\-\(\)]{0,15}$"
DEFAULT_MEMBER_COLOR = "#3B82F6"
DEFAULT_MEMBER_ROLE = "Member"
OWNER_ROLE = "owner"


class HouseType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    STUDIO = "studio"
    VILLA = "villa"
    OTHER = "other"


class HouseholdCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    number_of_rooms: Optional[int] = Field(None, ge=1, le=50)
    house_size: Optional[float] = Field(None, ge=10, le=10000)
    number_of_floors: Optional[int] = Field(None, ge=1, le=20)
    address: Optional[str] = Field(None, max_length=200)
    house_type: Optional[HouseType] = None
    has_garden: bool = False
    has_garage: bool = False
    has_basement: bool = False
    has_attic: bool = False
    description: Optional[str] = Field(None, max_length=500)


class HouseholdUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    number_of_rooms: Optional[int] = Field(None, ge=1, le=50)
    house_size: Optional[float] = Field(None, ge=10, le=10000)
    number_of_floors: Optional[int] = Field(None, ge=1, le=20)
    address: Optional[str] = Field(None, max_length=200)
    house_type: Optional[HouseType] = None
    has_garden: Optional[bool] = None
    has_garage: Optional[bool] = None
    has_basement: Optional[bool] = None
    has_attic: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=500)


class HouseholdResponse(BaseModel):
    id: str
    name: str
    number_of_rooms: Optional[int] = None
    house_size: Optional[float] = None
    number_of_floors: Optional[int] = None
    address: Optional[str] = None
    house_type: Optional[HouseType] = None
    has_garden: bool = False
    has_garage: bool = False
    has_basement: bool = False
    has_attic: bool = False
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberCreate(BaseModel):
    """A household member; link an account with user_id or describe a standalone profile."""
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    color: str = Field(DEFAULT_MEMBER_COLOR, pattern=HEX_COLOR_PATTERN)
    role: str = Field(DEFAULT_MEMBER_ROLE, max_length=30)
    age: Optional[int] = Field(None, ge=1, le=120)
    room: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    bio: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_identity(self):
        if not self.user_id and not self.name:
            raise ValueError("Either user_id or name is required")
        return self


class MemberUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    role: Optional[str] = Field(None, max_length=30)
    age: Optional[int] = Field(None, ge=1, le=120)
    room: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    bio: Optional[str] = Field(None, max_length=500)


class MemberResponse(BaseModel):
    id: str
    household_id: str
    user_id: Optional[str] = None
    name: str
    color: str = DEFAULT_MEMBER_COLOR
    role: Optional[str] = None
    age: Optional[int] = None
    room: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    join_date: datetime

    class Config:
        from_attributes = True


class HouseholdWithMembersResponse(HouseholdResponse):
    members: List[MemberResponse] = []
    tasks: List[TaskResponse] = []


class HouseholdTask(TaskResponse):
    comments: List[CommentResponse] = []
    comment_count: int = 0


class HouseholdDetail(HouseholdResponse):
    """Full household snapshot: members, tasks and each task's comments."""
    members: List[MemberResponse] = []
    tasks: List[HouseholdTask] = []
