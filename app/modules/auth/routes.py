from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    SessionResponse, SetRoleRequest
)
from app.modules.auth.service import AuthService
from app.core.dependencies import (
    get_auth_service, get_current_token, get_current_session, require_admin,
    get_user_household_ids
)
from app.core.session import AuthSession
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
):
    """Login and get access token"""
    token = service.login(login_data)
    token.households = get_user_household_ids(token.user_id, supabase)
    return token


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=SessionResponse)
async def get_current_user(
    session: AuthSession = Depends(get_current_session),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated user with role and household ids (for frontend UI)."""
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        name=session.name,
        role=session.role,
        households=get_user_household_ids(session.user_id, supabase),
    )


@router.post("/set-role", status_code=200)
async def set_role(
    request: SetRoleRequest,
    current_admin: AuthSession = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    """Set a user's role (requires current user to be admin)"""
    service.set_role(request.user_id, request.role)
    return {
        "message": f"User {request.user_id} role set to {request.role.value}",
        "user_id": request.user_id,
        "role": request.role.value
    }
