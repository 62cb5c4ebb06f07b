import logging
from datetime import datetime, timezone
from supabase import Client
from postgrest.exceptions import APIError
from app.modules.households.schemas import (
    HouseholdCreate, HouseholdUpdate, HouseholdResponse, HouseholdWithMembersResponse,
    HouseholdDetail, HouseholdTask, MemberCreate, MemberUpdate, MemberResponse, OWNER_ROLE
)
from app.modules.tasks.schemas import TaskResponse
from app.modules.comments.service import CommentService
from app.core.exceptions import (
    ConflictError, NotFoundError, ValidationError, is_unique_violation, is_foreign_key_violation
)
from app.core.session import AuthSession
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ASSIGNED_TASKS_MESSAGE = "Cannot remove member with assigned tasks. Please reassign tasks first."
MEMBER_EMAIL_INDEX = "ux_household_members_email"

# NOT NULL columns that a partial update may leave out but never clear
HOUSEHOLD_REQUIRED_FIELDS = ("has_garden", "has_garage", "has_basement", "has_attic")
MEMBER_REQUIRED_FIELDS = ("color", "role")


def _reject_nulls(update_data: Dict[str, Any], fields: tuple) -> None:
    for key in fields:
        if key in update_data and update_data[key] is None:
            raise ValidationError(f"{key} cannot be empty")


class HouseholdService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_household_row(self, household_id: str) -> Dict[str, Any]:
        result = self.supabase.table("households")\
            .select("*")\
            .eq("id", household_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFoundError(f"Household with id {household_id} not found")
        return result.data[0]

    def _members_by_household(self, household_ids: List[str]) -> Dict[str, List[MemberResponse]]:
        grouped: Dict[str, List[MemberResponse]] = {hid: [] for hid in household_ids}
        if not household_ids:
            return grouped
        result = self.supabase.table("household_members")\
            .select("*")\
            .in_("household_id", household_ids)\
            .order("join_date", desc=False)\
            .execute()
        for member in result.data or []:
            grouped.setdefault(member["household_id"], []).append(MemberResponse(**member))
        return grouped

    def _tasks_by_household(self, household_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {hid: [] for hid in household_ids}
        if not household_ids:
            return grouped
        result = self.supabase.table("tasks")\
            .select("*")\
            .in_("household_id", household_ids)\
            .order("created_at", desc=False)\
            .execute()
        for task in result.data or []:
            grouped.setdefault(task["household_id"], []).append(task)
        return grouped

    def _with_members_and_tasks(self, rows: List[Dict[str, Any]]) -> List[HouseholdWithMembersResponse]:
        household_ids = [h["id"] for h in rows]
        members = self._members_by_household(household_ids)
        tasks = self._tasks_by_household(household_ids)
        return [
            HouseholdWithMembersResponse(
                **household,
                members=members.get(household["id"], []),
                tasks=[TaskResponse(**t) for t in tasks.get(household["id"], [])],
            )
            for household in rows
        ]

    def create_household(self, household_data: HouseholdCreate, session: AuthSession) -> HouseholdResponse:
        """Create a household and add the creator as its owner"""
        payload = household_data.model_dump(mode="json")
        payload["created_by"] = session.user_id
        result = self.supabase.table("households").insert(payload).execute()
        household = result.data[0]

        self.supabase.table("household_members").insert({
            "household_id": household["id"],
            "user_id": session.user_id,
            "name": session.name or session.email,
            "email": session.email,
            "role": OWNER_ROLE,
        }).execute()

        logger.info(f"Household {household['id']} created by {session.user_id}")
        return HouseholdResponse(**household)

    def get_household(self, household_id: str) -> HouseholdResponse:
        return HouseholdResponse(**self._get_household_row(household_id))

    def get_household_detail(self, household_id: str) -> HouseholdDetail:
        """Household with members, tasks and every task's comments"""
        household = self._get_household_row(household_id)
        members = self._members_by_household([household_id])[household_id]
        tasks = self._tasks_by_household([household_id])[household_id]
        comments = CommentService(self.supabase).list_comments_for_tasks([t["id"] for t in tasks])
        return HouseholdDetail(
            **household,
            members=members,
            tasks=[
                HouseholdTask(
                    **task,
                    comments=comments.get(task["id"], []),
                    comment_count=len(comments.get(task["id"], [])),
                )
                for task in tasks
            ],
        )

    def list_households(self, household_ids: Optional[List[str]] = None) -> List[HouseholdWithMembersResponse]:
        """All households (household_ids=None) or the given ones, each with members and tasks"""
        if household_ids is not None and not household_ids:
            return []
        query = self.supabase.table("households").select("*")
        if household_ids is not None:
            query = query.in_("id", household_ids)
        result = query.order("created_at", desc=False).execute()
        return self._with_members_and_tasks(result.data or [])

    def update_household(self, household_id: str, household_data: HouseholdUpdate) -> HouseholdResponse:
        update_data = household_data.model_dump(mode="json", exclude_unset=True)
        if "name" in update_data and not update_data["name"]:
            del update_data["name"]
        _reject_nulls(update_data, HOUSEHOLD_REQUIRED_FIELDS)
        if not update_data:
            return self.get_household(household_id)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        result = self.supabase.table("households")\
            .update(update_data)\
            .eq("id", household_id)\
            .execute()
        if not result.data:
            raise NotFoundError(f"Household with id {household_id} not found")
        return HouseholdResponse(**result.data[0])

    def delete_household(self, household_id: str) -> Dict[str, Any]:
        """
        Delete a household with its comments, history, tasks and members.

        Runs as the delete_household Postgres function so the five deletes
        commit or roll back together.
        """
        result = self.supabase.rpc("delete_household", {"p_household_id": household_id}).execute()
        outcome = result.data or {}
        if not outcome.get("deleted"):
            raise NotFoundError(f"Household with id {household_id} not found.")
        logger.info(
            f"Household {household_id} deleted "
            f"({outcome.get('tasks', 0)} tasks, {outcome.get('members', 0)} members, "
            f"{outcome.get('comments', 0)} comments, {outcome.get('history', 0)} history entries)"
        )
        return outcome

    def list_members(self, household_id: str) -> List[MemberResponse]:
        self._get_household_row(household_id)
        return self._members_by_household([household_id])[household_id]

    def add_member(self, household_id: str, member_data: MemberCreate) -> MemberResponse:
        """Add a member. Duplicate account link or email within the household is a conflict."""
        self._get_household_row(household_id)

        name = member_data.name
        email = member_data.email.lower() if member_data.email else None
        if member_data.user_id:
            profile = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("id", member_data.user_id)\
                .execute()
            if not profile.data:
                raise NotFoundError("User not found")
            name = name or profile.data[0]["name"]
            email = email or profile.data[0]["email"]

            existing = self.supabase.table("household_members")\
                .select("id")\
                .eq("household_id", household_id)\
                .eq("user_id", member_data.user_id)\
                .execute()
            if existing.data:
                raise ConflictError("User is already a member of this household.")

        if email:
            existing = self.supabase.table("household_members")\
                .select("id")\
                .eq("household_id", household_id)\
                .eq("email", email)\
                .execute()
            if existing.data:
                raise ConflictError("A member with this email already exists in this household.")

        payload = member_data.model_dump(exclude={"user_id", "name", "email"})
        payload.update({
            "household_id": household_id,
            "user_id": member_data.user_id,
            "name": name,
            "email": email,
        })
        try:
            result = self.supabase.table("household_members").insert(payload).execute()
        except APIError as e:
            # a concurrent insert got past the checks above
            if is_unique_violation(e) and MEMBER_EMAIL_INDEX in (e.message or ""):
                raise ConflictError("A member with this email already exists in this household.")
            if is_unique_violation(e):
                raise ConflictError("User is already a member of this household.")
            raise

        logger.info(f"Member {result.data[0]['id']} added to household {household_id}")
        return MemberResponse(**result.data[0])

    def update_member(self, household_id: str, member_id: str, member_data: MemberUpdate) -> MemberResponse:
        update_data = member_data.model_dump(exclude_unset=True)
        if update_data.get("email"):
            update_data["email"] = update_data["email"].lower()
            existing = self.supabase.table("household_members")\
                .select("id")\
                .eq("household_id", household_id)\
                .eq("email", update_data["email"])\
                .neq("id", member_id)\
                .execute()
            if existing.data:
                raise ConflictError("A member with this email already exists in this household.")
        if "name" in update_data and not update_data["name"]:
            del update_data["name"]
        _reject_nulls(update_data, MEMBER_REQUIRED_FIELDS)

        if not update_data:
            result = self.supabase.table("household_members")\
                .select("*")\
                .eq("id", member_id)\
                .eq("household_id", household_id)\
                .execute()
        else:
            try:
                result = self.supabase.table("household_members")\
                    .update(update_data)\
                    .eq("id", member_id)\
                    .eq("household_id", household_id)\
                    .execute()
            except APIError as e:
                if is_unique_violation(e):
                    raise ConflictError("A member with this email already exists in this household.")
                raise
        if not result.data:
            raise NotFoundError("Member not found in this household.")
        return MemberResponse(**result.data[0])

    def remove_member(self, household_id: str, member_id: str) -> bool:
        """
        Remove a member unless a task in the household is assigned to them.

        The guard and the delete run together in the remove_household_member
        Postgres function; tasks.assigned_to also restricts the delete.
        """
        try:
            result = self.supabase.rpc("remove_household_member", {
                "p_household_id": household_id,
                "p_member_id": member_id,
            }).execute()
        except APIError as e:
            if is_foreign_key_violation(e):
                raise ConflictError(ASSIGNED_TASKS_MESSAGE)
            raise

        outcome = result.data or {}
        status = outcome.get("status")
        if status == "has_tasks":
            logger.warning(
                f"Refused to remove member {member_id} from household {household_id}: "
                f"{outcome.get('assigned_tasks')} assigned task(s)"
            )
            raise ConflictError(ASSIGNED_TASKS_MESSAGE)
        if status != "removed":
            raise NotFoundError("Member not found in this household.")
        logger.info(f"Member {member_id} removed from household {household_id}")
        return True
