from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.households.schemas import (
    HouseholdCreate, HouseholdUpdate, HouseholdResponse, HouseholdWithMembersResponse,
    HouseholdDetail, MemberCreate, MemberUpdate, MemberResponse
)
from app.modules.households.service import HouseholdService
from app.core.dependencies import (
    get_current_session, check_household_member, check_household_owner,
    get_user_household_ids, get_access_cache
)
from app.core.session import AuthSession
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/households", tags=["households"])


def get_household_service(supabase: Client = Depends(get_supabase)) -> HouseholdService:
    return HouseholdService(supabase)


@router.post("", response_model=HouseholdResponse, status_code=201)
async def create_household(
    household_data: HouseholdCreate,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service)
):
    """Create a household; the creator becomes its owner"""
    return service.create_household(household_data, session)


@router.get("", response_model=List[HouseholdWithMembersResponse])
async def list_households(
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """List households with members and tasks (all of them for admins)"""
    household_ids = None if session.is_admin else get_user_household_ids(session.user_id, supabase, cache)
    return service.list_households(household_ids)


@router.get("/{household_id}", response_model=HouseholdDetail)
async def get_household(
    household_id: str,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Household snapshot with members, tasks and comments"""
    check_household_member(household_id, session, supabase)
    return service.get_household_detail(household_id)


@router.put("/{household_id}", response_model=HouseholdResponse)
async def update_household(
    household_id: str,
    household_data: HouseholdUpdate,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Update household details (owner or admin)"""
    check_household_owner(household_id, session, supabase)
    return service.update_household(household_id, household_data)


@router.delete("/{household_id}", status_code=200)
async def delete_household(
    household_id: str,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a household with all its tasks, comments, history and members (owner or admin)"""
    check_household_owner(household_id, session, supabase)
    service.delete_household(household_id)
    return {"message": "Household deleted successfully."}


@router.get("/{household_id}/members", response_model=List[MemberResponse])
async def list_members(
    household_id: str,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """List members of a household"""
    check_household_member(household_id, session, supabase)
    return service.list_members(household_id)


@router.post("/{household_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    household_id: str,
    member_data: MemberCreate,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Add a member (owner or admin)"""
    check_household_owner(household_id, session, supabase)
    return service.add_member(household_id, member_data)


@router.put("/{household_id}/members/{member_id}", response_model=MemberResponse)
async def update_member(
    household_id: str,
    member_id: str,
    member_data: MemberUpdate,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Update a member's profile (owner or admin)"""
    check_household_owner(household_id, session, supabase)
    return service.update_member(household_id, member_id, member_data)


@router.delete("/{household_id}/members/{member_id}", status_code=200)
async def remove_member(
    household_id: str,
    member_id: str,
    session: AuthSession = Depends(get_current_session),
    service: HouseholdService = Depends(get_household_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member with no assigned tasks (owner or admin)"""
    check_household_owner(household_id, session, supabase)
    service.remove_member(household_id, member_id)
    return {"message": "Member removed successfully."}
