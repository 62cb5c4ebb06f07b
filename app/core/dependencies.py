"""
Core dependencies for route protection and household access checks
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from app.core.exceptions import AuthError, ForbiddenError, NotFoundError
from app.core.session import AuthSession
from app.modules.households.schemas import OWNER_ROLE
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (household_ids)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authenticated")
    return credentials.credentials


def get_current_session(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthSession:
    """Resolve the caller's AuthSession from the bearer token"""
    return auth_service.get_session(token)


def require_admin(session: AuthSession = Depends(get_current_session)) -> AuthSession:
    if not session.is_admin:
        raise ForbiddenError("Admin role required")
    return session


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns the request-scoped access cache."""
    return _get_request_cache(request)


def get_user_household_ids(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return household_ids the user is linked to through household_members. Uses request-scoped cache when provided."""
    if cache is not None and "household_ids" in cache:
        return cache["household_ids"]
    result = supabase.table("household_members")\
        .select("household_id")\
        .eq("user_id", user_id)\
        .execute()
    ids = list(dict.fromkeys(m["household_id"] for m in result.data or []))
    if cache is not None:
        cache["household_ids"] = ids
    return ids


def check_household_member(
    household_id: str,
    session: AuthSession,
    supabase: Client
) -> AuthSession:
    """Allow admins and users linked to a member of the household"""
    if session.is_admin:
        return session
    member_result = supabase.table("household_members")\
        .select("id")\
        .eq("household_id", household_id)\
        .eq("user_id", session.user_id)\
        .execute()
    if member_result.data:
        return session
    logger.warning(f"User {session.user_id} denied access to household {household_id}")
    raise ForbiddenError("You must be a member of this household")


def check_household_owner(
    household_id: str,
    session: AuthSession,
    supabase: Client
) -> AuthSession:
    """Allow admins and the household's owners"""
    if session.is_admin:
        return session
    member_result = supabase.table("household_members")\
        .select("role")\
        .eq("household_id", household_id)\
        .eq("user_id", session.user_id)\
        .execute()
    if any((m.get("role") or "").lower() == OWNER_ROLE for m in member_result.data or []):
        return session
    logger.warning(f"User {session.user_id} is not an owner of household {household_id}")
    raise ForbiddenError("You must be a household owner or an admin to perform this action")


def check_task_access(
    task_id: str,
    session: AuthSession,
    supabase: Client
) -> Dict[str, Any]:
    """Return the task row if the caller may access its household"""
    task_result = supabase.table("tasks")\
        .select("*")\
        .eq("id", task_id)\
        .limit(1)\
        .execute()
    if not task_result.data:
        raise NotFoundError(f"Task with id {task_id} not found")
    task = task_result.data[0]
    check_household_member(task["household_id"], session, supabase)
    return task


def user_can_access_user(current_user_id: str, target_user_id: str, supabase: Client) -> bool:
    """True if target is self or shares at least one household with current user"""
    if current_user_id == target_user_id:
        return True
    my_household_ids = get_user_household_ids(current_user_id, supabase)
    if not my_household_ids:
        return False
    member_result = supabase.table("household_members")\
        .select("id")\
        .eq("user_id", target_user_id)\
        .in_("household_id", my_household_ids)\
        .limit(1)\
        .execute()
    return bool(member_result.data)
