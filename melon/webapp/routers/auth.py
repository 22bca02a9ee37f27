"""
Authentication endpoints (email/password signup, login, logout).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response

from services.auth_service import AuthService
from services.profile_service import ProfileService
from utils.logger import get_logger
from ..dependencies import (
    get_auth_service,
    get_current_user,
    get_profile_service,
    get_session_token,
    set_session_cookie,
)
from ..schemas import LoginRequest, ProfileResponse, SignupRequest, action_payload

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = get_logger(__name__)


def _start_session(request: Request, response: Response, result) -> None:
    if result.success:
        set_session_cookie(
            response,
            request.app.state.session_cookie_name,
            result.data["session_token"],
            request.app.state.session_ttl_days,
        )


@router.post("/signup")
async def signup(
    request: Request,
    response: Response,
    signup_request: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create an account and log it in. The client continues to onboarding."""
    try:
        result = auth_service.signup(
            signup_request.email,
            signup_request.password,
            signup_request.confirm_password,
        )
        _start_session(request, response, result)
        return {**action_payload(result), "next": "/onboarding" if result.success else None}
    except Exception as e:
        logger.exception(f"Error in signup: {e}")
        raise HTTPException(status_code=500, detail=f"Signup failed: {str(e)}")


@router.post("/login")
async def login(
    request: Request,
    response: Response,
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        result = auth_service.login(login_request.email, login_request.password)
        _start_session(request, response, result)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error in login: {e}")
        raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        result = auth_service.logout(get_session_token(request, authorization))
        response.delete_cookie(request.app.state.session_cookie_name, path="/")
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error in logout: {e}")
        raise HTTPException(status_code=500, detail=f"Logout failed: {str(e)}")


@router.get("/me")
async def get_me(
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """Current account and its profile (null before onboarding)."""
    try:
        profile = profile_service.get_profile(user_id)
        return {
            "user_id": user_id,
            "profile": ProfileResponse.model_validate(profile) if profile else None,
            "onboarding_completed": bool(profile and profile.onboarding_completed),
        }
    except Exception as e:
        logger.exception(f"Error getting current user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get current user: {str(e)}")
