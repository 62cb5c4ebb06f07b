from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_session, check_household_member, check_task_access
from app.core.session import AuthSession
from supabase import Client

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(supabase: Client = Depends(get_supabase)) -> TaskService:
    return TaskService(supabase)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    session: AuthSession = Depends(get_current_session),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a task in a household (household members and admins)"""
    check_household_member(task_data.household_id, session, supabase)
    return service.create_task(task_data, session)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    session: AuthSession = Depends(get_current_session),
    supabase: Client = Depends(get_supabase)
):
    """Get a task"""
    return TaskResponse(**check_task_access(task_id, session, supabase))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    session: AuthSession = Depends(get_current_session),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    """Update a task; `completed` toggles between Done and the previous open status"""
    check_task_access(task_id, session, supabase)
    return service.update_task(task_id, task_data, session)


@router.delete("/{task_id}", status_code=200)
async def delete_task(
    task_id: str,
    session: AuthSession = Depends(get_current_session),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a task with its comments"""
    check_task_access(task_id, session, supabase)
    service.delete_task(task_id, session)
    return {"message": "Task deleted successfully"}
