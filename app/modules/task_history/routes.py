from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.task_history.schemas import TaskHistoryResponse, HistorySortKey, HistoryStats
from app.modules.task_history.service import TaskHistoryService
from app.core.dependencies import (
    get_current_session, check_household_member, get_user_household_ids, get_access_cache
)
from app.core.session import AuthSession
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(tags=["task-history"])


def get_history_service(supabase: Client = Depends(get_supabase)) -> TaskHistoryService:
    return TaskHistoryService(supabase)


def _visible_household_ids(
    household_id: Optional[str],
    session: AuthSession,
    supabase: Client,
    cache: Dict,
) -> Optional[List[str]]:
    """Households whose history the caller may read; None means unrestricted (admin)."""
    if household_id:
        check_household_member(household_id, session, supabase)
        return [household_id]
    if session.is_admin:
        return None
    return get_user_household_ids(session.user_id, supabase, cache)


@router.get("/history", response_model=List[TaskHistoryResponse])
async def query_history(
    household_id: Optional[str] = None,
    task_id: Optional[str] = None,
    user_id: Optional[str] = None,
    sort_by: HistorySortKey = HistorySortKey.DATE,
    session: AuthSession = Depends(get_current_session),
    service: TaskHistoryService = Depends(get_history_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Task history filtered by any combination of household, task and user"""
    household_ids = _visible_household_ids(household_id, session, supabase, cache)
    return service.query(household_ids=household_ids, task_id=task_id, user_id=user_id, sort_by=sort_by)


@router.get("/history/stats", response_model=HistoryStats)
async def history_stats(
    household_id: Optional[str] = None,
    task_id: Optional[str] = None,
    user_id: Optional[str] = None,
    session: AuthSession = Depends(get_current_session),
    service: TaskHistoryService = Depends(get_history_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Total changes, completions and distinct active users over the filtered history"""
    household_ids = _visible_household_ids(household_id, session, supabase, cache)
    return service.stats(household_ids=household_ids, task_id=task_id, user_id=user_id)


@router.get("/households/{household_id}/history", response_model=List[TaskHistoryResponse])
async def household_history(
    household_id: str,
    sort_by: HistorySortKey = HistorySortKey.DATE,
    session: AuthSession = Depends(get_current_session),
    service: TaskHistoryService = Depends(get_history_service),
    supabase: Client = Depends(get_supabase)
):
    """History of all tasks in a household, deleted tasks included"""
    check_household_member(household_id, session, supabase)
    return service.query(household_ids=[household_id], sort_by=sort_by)


@router.get("/tasks/{task_id}/history", response_model=List[TaskHistoryResponse])
async def task_history(
    task_id: str,
    session: AuthSession = Depends(get_current_session),
    service: TaskHistoryService = Depends(get_history_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """History of one task, newest first (available after the task is deleted)"""
    household_ids = _visible_household_ids(None, session, supabase, cache)
    return service.query(household_ids=household_ids, task_id=task_id)
