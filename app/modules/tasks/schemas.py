from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from typing import Optional
from datetime import date, datetime
from enum import Enum


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    household_id: str
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str = Field("General", min_length=1, max_length=50)
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.TODO


class TaskUpdate(BaseModel):
    """Partial update. `completed` is the boolean view of `status` and maps onto it."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    assigned_to: Optional[str] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    completed: Optional[bool] = None

    @model_validator(mode="after")
    def check_status_agrees_with_completed(self):
        if self.status is not None and self.completed is not None:
            if self.completed != (self.status == TaskStatus.DONE):
                raise ValueError("status and completed disagree")
        return self


class TaskResponse(BaseModel):
    id: str
    household_id: str
    title: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str = "General"
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def completed(self) -> bool:
        return self.status == TaskStatus.DONE
