import logging
from supabase import Client
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse, TaskStatus
from app.modules.task_history.service import TaskHistoryService
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.session import AuthSession
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.history = TaskHistoryService(supabase)

    def _ensure_household(self, household_id: str) -> None:
        result = self.supabase.table("households")\
            .select("id")\
            .eq("id", household_id)\
            .execute()
        if not result.data:
            raise NotFoundError(f"Household with id {household_id} not found")

    def _ensure_assignee(self, household_id: str, member_id: str) -> None:
        result = self.supabase.table("household_members")\
            .select("id")\
            .eq("id", member_id)\
            .eq("household_id", household_id)\
            .execute()
        if not result.data:
            raise ValidationError("Tasks can only be assigned to members of the same household")

    def get_task_row(self, task_id: str) -> Dict[str, Any]:
        result = self.supabase.table("tasks")\
            .select("*")\
            .eq("id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFoundError(f"Task with id {task_id} not found")
        return result.data[0]

    def create_task(self, task_data: TaskCreate, session: AuthSession) -> TaskResponse:
        """
        Create a task and record its (created -> initial status) transition.

        Both rows are written by the create_task Postgres function, so a task
        never exists without its creation entry.
        """
        self._ensure_household(task_data.household_id)
        if task_data.assigned_to:
            self._ensure_assignee(task_data.household_id, task_data.assigned_to)

        result = self.supabase.rpc("create_task", {
            "p_task": {
                "household_id": task_data.household_id,
                "title": task_data.title,
                "description": task_data.description,
                "assigned_to": task_data.assigned_to,
                "priority": task_data.priority.value,
                "category": task_data.category,
                "due_date": task_data.due_date.isoformat() if task_data.due_date else None,
                "status": task_data.status.value,
            },
            "p_created_by": session.user_id,
        }).execute()
        task = result.data

        logger.info(f"Task {task['id']} created in household {task['household_id']}")
        return TaskResponse(**task)

    def resolve_status(self, task: Dict[str, Any], task_data: TaskUpdate) -> TaskStatus:
        """
        Target status for an update.

        completed=True maps to Done. completed=False on a Done task reopens it to the
        status it held before completion (In Progress when unknown), so a double
        toggle restores the original status.
        """
        current = TaskStatus(task["status"])
        if task_data.status is not None:
            return task_data.status
        if task_data.completed is None:
            return current
        if task_data.completed:
            return TaskStatus.DONE
        if current != TaskStatus.DONE:
            return current
        return self.history.status_before_completion(task["id"]) or TaskStatus.IN_PROGRESS

    def update_task(self, task_id: str, task_data: TaskUpdate, session: AuthSession) -> TaskResponse:
        """
        Update fields and/or status through the update_task Postgres function.

        A status change is compare-and-swap on the status read here and is
        recorded in task_history in the same transaction. Unchanged status
        writes no history.
        """
        task = self.get_task_row(task_id)
        fields = task_data.model_dump(exclude_unset=True, exclude={"status", "completed"})

        if fields.get("assigned_to"):
            self._ensure_assignee(task["household_id"], fields["assigned_to"])
        for key in ("title", "priority", "category"):
            if key in fields and fields[key] is None:
                raise ValidationError(f"{key} cannot be empty")

        update_data: Dict[str, Any] = {}
        for key, value in fields.items():
            if key == "priority":
                value = value.value
            elif key == "due_date" and value is not None:
                value = value.isoformat()
            update_data[key] = value

        old_status = TaskStatus(task["status"])
        new_status = self.resolve_status(task, task_data)
        if new_status != old_status:
            update_data["status"] = new_status.value

        if not update_data:
            return TaskResponse(**task)

        result = self.supabase.rpc("update_task", {
            "p_task_id": task_id,
            "p_changes": update_data,
            "p_expected_status": old_status.value,
            "p_changed_by": session.user_id,
        }).execute()
        outcome = result.data or {}

        if outcome.get("status") == "conflict":
            raise ConflictError("Task status was changed by someone else. Reload and try again.")
        if outcome.get("status") != "updated":
            raise NotFoundError(f"Task with id {task_id} not found")

        if new_status != old_status:
            logger.info(f"Task {task_id} status {old_status.value} -> {new_status.value}")
        return TaskResponse(**outcome["task"])

    def delete_task(self, task_id: str, session: AuthSession) -> Optional[str]:
        """Delete a task and its comments, recording a (status -> deleted) entry. Returns the final status."""
        result = self.supabase.rpc("delete_task", {
            "p_task_id": task_id,
            "p_changed_by": session.user_id,
        }).execute()
        outcome = result.data or {}
        if outcome.get("status") != "deleted":
            raise NotFoundError(f"Task with id {task_id} not found")
        logger.info(f"Task {task_id} deleted (was {outcome.get('old_status')})")
        return outcome.get("old_status")
