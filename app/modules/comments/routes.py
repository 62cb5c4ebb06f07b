from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from app.modules.comments.service import CommentService
from app.core.dependencies import get_current_session, check_task_access
from app.core.session import AuthSession
from supabase import Client
from typing import List

router = APIRouter(prefix="/tasks", tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/{task_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    task_id: str,
    session: AuthSession = Depends(get_current_session),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """List comments on a task, oldest first"""
    check_task_access(task_id, session, supabase)
    return service.list_comments(task_id)


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    task_id: str,
    comment_data: CommentCreate,
    session: AuthSession = Depends(get_current_session),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """Comment on a task as the current user"""
    check_task_access(task_id, session, supabase)
    return service.add_comment(task_id, session.user_id, comment_data.content)


@router.put("/{task_id}/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    task_id: str,
    comment_id: str,
    comment_data: CommentUpdate,
    session: AuthSession = Depends(get_current_session),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """Edit a comment (author or admin)"""
    check_task_access(task_id, session, supabase)
    return service.update_comment(task_id, comment_id, comment_data.content, session)


@router.delete("/{task_id}/comments/{comment_id}", status_code=200)
async def delete_comment(
    task_id: str,
    comment_id: str,
    session: AuthSession = Depends(get_current_session),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a comment (author or admin)"""
    check_task_access(task_id, session, supabase)
    service.delete_comment(task_id, comment_id, session)
    return {"message": "Comment deleted"}
