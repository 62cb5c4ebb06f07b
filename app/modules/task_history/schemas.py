from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

CREATED_STATUS = "created"
DELETED_STATUS = "deleted"


class HistorySortKey(str, Enum):
    DATE = "date"
    USER = "user"
    TASK = "task"


class TaskHistoryResponse(BaseModel):
    id: str
    task_id: str
    household_id: str
    changed_by: Optional[str] = None
    old_status: str
    new_status: str
    changed_at: datetime
    changed_by_name: Optional[str] = None
    task_title: Optional[str] = None

    class Config:
        from_attributes = True


class HistoryStats(BaseModel):
    total_changes: int
    completed: int
    active_users: int
