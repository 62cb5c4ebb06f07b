import logging
from supabase import Client
from app.modules.task_history.schemas import (
    TaskHistoryResponse, HistorySortKey, HistoryStats, CREATED_STATUS
)
from app.modules.tasks.schemas import TaskStatus
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"


class TaskHistoryService:
    """Append-only audit trail of task status transitions."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def status_before_completion(self, task_id: str) -> Optional[TaskStatus]:
        """Status a task held right before its latest transition to Done, if it was a real status."""
        result = self.supabase.table("task_history")\
            .select("*")\
            .eq("task_id", task_id)\
            .eq("new_status", TaskStatus.DONE.value)\
            .order("changed_at", desc=True)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        old_status = result.data[0]["old_status"]
        if old_status == CREATED_STATUS or old_status not in {s.value for s in TaskStatus}:
            return None
        return TaskStatus(old_status)

    def _fetch(
        self,
        household_ids: Optional[List[str]] = None,
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[dict]:
        if household_ids is not None and not household_ids:
            return []
        query = self.supabase.table("task_history").select("*")
        if household_ids is not None:
            if len(household_ids) == 1:
                query = query.eq("household_id", household_ids[0])
            else:
                query = query.in_("household_id", household_ids)
        if task_id:
            query = query.eq("task_id", task_id)
        if user_id:
            query = query.eq("changed_by", user_id)
        result = query.order("changed_at", desc=True).execute()
        return result.data or []

    def _display_names(self, rows: List[dict]) -> Dict[str, Dict[str, str]]:
        user_ids = list({r["changed_by"] for r in rows if r.get("changed_by")})
        task_ids = list({r["task_id"] for r in rows})
        users: Dict[str, str] = {}
        tasks: Dict[str, str] = {}
        if user_ids:
            result = self.supabase.table("user_profiles").select("id, name").in_("id", user_ids).execute()
            users = {u["id"]: u["name"] for u in result.data or []}
        if task_ids:
            result = self.supabase.table("tasks").select("id, title").in_("id", task_ids).execute()
            tasks = {t["id"]: t["title"] for t in result.data or []}
        return {"users": users, "tasks": tasks}

    def query(
        self,
        household_ids: Optional[List[str]] = None,
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
        sort_by: HistorySortKey = HistorySortKey.DATE,
    ) -> List[TaskHistoryResponse]:
        """
        Entries matching every given scope. household_ids=None means unrestricted.
        Sorted newest first, or by changed-by / task display name (ties keep date order).
        """
        rows = self._fetch(household_ids, task_id, user_id)
        names = self._display_names(rows)
        entries = [
            TaskHistoryResponse(
                **row,
                changed_by_name=names["users"].get(row.get("changed_by")),
                task_title=names["tasks"].get(row["task_id"]),
            )
            for row in rows
        ]
        entries.sort(key=lambda e: e.changed_at, reverse=True)
        if sort_by == HistorySortKey.USER:
            entries.sort(key=lambda e: (e.changed_by_name or UNKNOWN_NAME).lower())
        elif sort_by == HistorySortKey.TASK:
            entries.sort(key=lambda e: (e.task_title or UNKNOWN_NAME).lower())
        return entries

    def stats(
        self,
        household_ids: Optional[List[str]] = None,
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> HistoryStats:
        rows = self._fetch(household_ids, task_id, user_id)
        return HistoryStats(
            total_changes=len(rows),
            completed=sum(1 for r in rows if r["new_status"] == TaskStatus.DONE.value),
            active_users=len({r["changed_by"] for r in rows if r.get("changed_by")}),
        )
