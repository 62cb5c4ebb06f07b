import logging
from datetime import datetime, timezone
from supabase import Client
from app.modules.comments.schemas import CommentResponse
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.session import AuthSession
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @staticmethod
    def _clean_content(content: str) -> str:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Content is required")
        return content

    def _with_authors(self, rows: List[Dict[str, Any]]) -> List[CommentResponse]:
        """Join comment rows with their author's display name and avatar"""
        user_ids = list({r["user_id"] for r in rows})
        authors: Dict[str, Dict[str, Any]] = {}
        if user_ids:
            result = self.supabase.table("user_profiles")\
                .select("id, name, avatar_url")\
                .in_("id", user_ids)\
                .execute()
            authors = {u["id"]: u for u in result.data or []}
        return [
            CommentResponse(
                **row,
                user_name=authors.get(row["user_id"], {}).get("name"),
                user_avatar=authors.get(row["user_id"], {}).get("avatar_url"),
            )
            for row in rows
        ]

    def _get_comment_row(self, task_id: str, comment_id: str) -> Dict[str, Any]:
        result = self.supabase.table("comments")\
            .select("*")\
            .eq("id", comment_id)\
            .eq("task_id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFoundError("Comment not found")
        return result.data[0]

    @staticmethod
    def _check_author_or_admin(comment: Dict[str, Any], session: AuthSession) -> None:
        if session.is_admin or comment["user_id"] == session.user_id:
            return
        raise ForbiddenError("Only the comment's author or an admin can change it")

    def add_comment(self, task_id: str, user_id: str, content: str) -> CommentResponse:
        """Attach a comment to a task and return it with the author's name"""
        content = self._clean_content(content)
        task = self.supabase.table("tasks").select("id").eq("id", task_id).execute()
        if not task.data:
            raise NotFoundError(f"Task with id {task_id} not found")

        result = self.supabase.table("comments").insert({
            "task_id": task_id,
            "user_id": user_id,
            "content": content,
        }).execute()
        return self._with_authors(result.data)[0]

    def list_comments(self, task_id: str) -> List[CommentResponse]:
        """Comments on a task, oldest first"""
        result = self.supabase.table("comments")\
            .select("*")\
            .eq("task_id", task_id)\
            .order("created_at", desc=False)\
            .execute()
        return self._with_authors(result.data or [])

    def list_comments_for_tasks(self, task_ids: List[str]) -> Dict[str, List[CommentResponse]]:
        """Comments grouped by task id, each group oldest first"""
        grouped: Dict[str, List[CommentResponse]] = {task_id: [] for task_id in task_ids}
        if not task_ids:
            return grouped
        result = self.supabase.table("comments")\
            .select("*")\
            .in_("task_id", task_ids)\
            .order("created_at", desc=False)\
            .execute()
        for comment in self._with_authors(result.data or []):
            grouped.setdefault(comment.task_id, []).append(comment)
        return grouped

    def list_comments_by_user(self, user_id: str) -> List[CommentResponse]:
        """Comments written by a user, newest first"""
        result = self.supabase.table("comments")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("created_at", desc=True)\
            .execute()
        return self._with_authors(result.data or [])

    def update_comment(self, task_id: str, comment_id: str, content: str, session: AuthSession) -> CommentResponse:
        content = self._clean_content(content)
        comment = self._get_comment_row(task_id, comment_id)
        self._check_author_or_admin(comment, session)

        result = self.supabase.table("comments")\
            .update({"content": content, "updated_at": datetime.now(timezone.utc).isoformat()})\
            .eq("id", comment_id)\
            .execute()
        if not result.data:
            raise NotFoundError("Comment not found")
        return self._with_authors(result.data)[0]

    def delete_comment(self, task_id: str, comment_id: str, session: AuthSession) -> bool:
        comment = self._get_comment_row(task_id, comment_id)
        self._check_author_or_admin(comment, session)

        result = self.supabase.table("comments")\
            .delete()\
            .eq("id", comment_id)\
            .execute()
        if not result.data:
            raise NotFoundError("Comment not found")
        logger.info(f"Comment {comment_id} deleted by {session.user_id}")
        return True
