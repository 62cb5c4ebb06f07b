import hashlib
import logging
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.core.exceptions import AuthError, ConflictError, InternalError, NotFoundError
from app.core.session import AuthSession, UserRole
from app.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("user_profiles")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """
        Register a new user with Supabase Auth.

        The on_auth_user_created trigger writes the profile row in the same
        transaction as the auth user, so a failed profile insert fails the sign-up.
        """
        email = register_data.email.lower()
        existing = self.supabase.table("user_profiles")\
            .select("id")\
            .eq("email", email)\
            .execute()
        if existing.data:
            raise ConflictError("User with this email already exists.")

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": register_data.password,
                "options": {
                    "data": {"name": register_data.name}
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConflictError("User with this email already exists.")
            logger.error(f"Registration failed for {email}: {error_message}")
            raise InternalError("Registration failed")

        if not auth_response.user:
            raise InternalError("Failed to register user")

        logger.info(f"Registered user {auth_response.user.id}")
        return RegisterResponse(
            user_id=auth_response.user.id,
            email=email,
            name=register_data.name,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email.lower(),
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise AuthError("Invalid credentials")
            logger.error(f"Login failed: {error_message}")
            raise InternalError("Login failed")

        if not auth_response.user or not auth_response.session:
            raise AuthError("Invalid credentials")

        profile = self._get_profile(auth_response.user.id) or {}
        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email,
            name=profile.get("name"),
            role=profile.get("role") or UserRole.USER,
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise AuthError("Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + settings.auth_cache_ttl_seconds)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AuthError("Invalid or expired token")
            raise AuthError("Authentication failed")

    def get_session(self, token: str) -> AuthSession:
        """Resolve a bearer token into the request's AuthSession (role is read fresh from the profile)"""
        user_data = self.get_current_user(token)
        profile = self._get_profile(user_data["id"])
        if not profile:
            raise AuthError("User profile not found")
        return AuthSession(
            user_id=user_data["id"],
            email=profile.get("email") or user_data.get("email") or "",
            name=profile.get("name"),
            role=profile.get("role") or UserRole.USER,
            access_token=token,
        )

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs; they expire on their own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def set_role(self, user_id: str, role: UserRole) -> Dict[str, Any]:
        """Set a user's role on their profile"""
        result = self.supabase.table("user_profiles")\
            .update({"role": role.value})\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            raise NotFoundError("User not found")
        logger.info(f"Role of user {user_id} set to {role.value}")
        return result.data[0]
