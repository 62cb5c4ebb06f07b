from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import UserUpdate, UserResponse, UserSummary
from app.modules.users.service import UserService
from app.modules.households.schemas import HouseholdWithMembersResponse
from app.modules.households.service import HouseholdService
from app.modules.comments.schemas import CommentResponse
from app.modules.comments.service import CommentService
from app.core.dependencies import get_current_session, get_user_household_ids, user_can_access_user
from app.core.exceptions import ForbiddenError
from app.core.session import AuthSession
from supabase import Client
from typing import List

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def _check_can_view(user_id: str, session: AuthSession, supabase: Client) -> None:
    if not session.is_admin and not user_can_access_user(session.user_id, user_id, supabase):
        raise ForbiddenError("User not accessible")


@router.get("", response_model=List[UserSummary])
async def list_users(
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service)
):
    """List users: admins get everyone, others the users they share a household with"""
    return service.list_users(current_user_id=session.user_id, allow_all=session.is_admin)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service),
    supabase: Client = Depends(get_supabase)
):
    """Get user by ID (only if same user, shares a household, or admin)"""
    _check_can_view(user_id, session, supabase)
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data_body: UserUpdate,
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service)
):
    """Update a profile (self or admin)"""
    if not session.is_admin and session.user_id != user_id:
        raise ForbiddenError("You can only edit your own profile")
    return service.update_user(user_id, user_data_body)


@router.get("/{user_id}/households", response_model=List[HouseholdWithMembersResponse])
async def get_user_households(
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    supabase: Client = Depends(get_supabase)
):
    """Households the user belongs to, with members and tasks (self or admin)"""
    if not session.is_admin and session.user_id != user_id:
        raise ForbiddenError("User not accessible")
    household_ids = get_user_household_ids(user_id, supabase)
    return HouseholdService(supabase).list_households(household_ids)


@router.get("/{user_id}/comments", response_model=List[CommentResponse])
async def get_user_comments(
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    supabase: Client = Depends(get_supabase)
):
    """Comments written by a user, newest first (self or admin)"""
    if not session.is_admin and session.user_id != user_id:
        raise ForbiddenError("User not accessible")
    return CommentService(supabase).list_comments_by_user(user_id)
