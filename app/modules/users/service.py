from datetime import datetime, timezone
from supabase import Client
from app.modules.users.schemas import UserUpdate, UserResponse, UserSummary
from app.core.exceptions import NotFoundError
from typing import List


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        result = self.supabase.table("user_profiles")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()

        if not result.data:
            raise NotFoundError("User not found")

        return UserResponse(**result.data[0])

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if user_data.name is not None:
            update_data["name"] = user_data.name.strip()
        if user_data.avatar_url is not None:
            update_data["avatar_url"] = user_data.avatar_url
        if user_data.phone is not None:
            update_data["phone"] = user_data.phone
        if user_data.bio is not None:
            update_data["bio"] = user_data.bio

        result = self.supabase.table("user_profiles")\
            .update(update_data)\
            .eq("id", user_id)\
            .execute()

        if not result.data:
            raise NotFoundError("User not found")

        return UserResponse(**result.data[0])

    def list_users(
        self,
        current_user_id: str,
        allow_all: bool = False
    ) -> List[UserSummary]:
        """List users: admins get everyone; others get the users sharing one of their households."""
        if allow_all:
            result = self.supabase.table("user_profiles")\
                .select("id, name, email, role")\
                .order("name", desc=False)\
                .execute()
            return [UserSummary(**user) for user in result.data or []]
        # 1. Households of the current user
        households_result = self.supabase.table("household_members")\
            .select("household_id")\
            .eq("user_id", current_user_id)\
            .execute()
        household_ids = list({h["household_id"] for h in households_result.data or []})
        # 2. Linked accounts in those households, always including the caller
        user_ids = {current_user_id}
        if household_ids:
            members_result = self.supabase.table("household_members")\
                .select("user_id")\
                .in_("household_id", household_ids)\
                .execute()
            user_ids.update(m["user_id"] for m in members_result.data or [] if m.get("user_id"))
        # 3. Their profiles
        result = self.supabase.table("user_profiles")\
            .select("id, name, email, role")\
            .in_("id", list(user_ids))\
            .order("name", desc=False)\
            .execute()
        return [UserSummary(**user) for user in result.data or []]
