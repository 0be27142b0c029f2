# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register                 - Create account, mail verification link
#   POST /auth/login                    - Get token (verified accounts only)
#   GET  /auth/{user_id}/verify/{token} - Verify email address
#
# Password reset:
#   POST /password/reset-password-link            - Mail a reset link
#   GET  /password/reset-password/{user_id}/{token} - Check a reset link
#   POST /password/reset-password/{user_id}/{token} - Set new password
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from blogapi.api.deps import get_state
from blogapi.api.state import AppState
from blogapi.auth.passwords import check_password_complexity
from blogapi.core.models import ImageRef

router = APIRouter(prefix="/auth", tags=["auth"])
password_router = APIRouter(prefix="/password", tags=["password"])


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        return check_password_complexity(value)


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(min_length=8)


class LoginResponse(BaseModel):
    id: str
    username: str
    is_admin: bool
    profile_photo: ImageRef
    token: str


class ResetLinkRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class NewPasswordRequest(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        return check_password_complexity(value)


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", status_code=201)
async def register(data: RegisterRequest, state: AppState = Depends(get_state)):
    """
    Create a new account.

    No token is returned: the account must be verified first.
    """
    await state.accounts.register(data.username, data.email, data.password)
    return {"message": "We sent you an email, please verify your email address"}


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, state: AppState = Depends(get_state)):
    """
    Authenticate and get a token.

    Unverified accounts get a 403 `verification_required` and a fresh
    verification email instead.
    """
    result = await state.accounts.login(data.email, data.password)
    return LoginResponse(
        id=result.user.id,
        username=result.user.username,
        is_admin=result.user.is_admin,
        profile_photo=result.user.profile_photo,
        token=result.token,
    )


@router.get("/{user_id}/verify/{token}")
async def verify_account(user_id: str, token: str, state: AppState = Depends(get_state)):
    """Verify email address using the link from the email."""
    await state.accounts.verify_account(user_id, token)
    return {"message": "Your account has been verified"}


# =============================================================================
# Password Reset
# =============================================================================

@password_router.post("/reset-password-link")
async def send_reset_link(data: ResetLinkRequest, state: AppState = Depends(get_state)):
    """
    Request password reset email.

    Always returns success to prevent email enumeration.
    """
    await state.accounts.request_password_reset(data.email)
    return {"message": "If an account exists with this email, a reset link has been sent"}


@password_router.get("/reset-password/{user_id}/{token}")
async def check_reset_link(user_id: str, token: str, state: AppState = Depends(get_state)):
    await state.accounts.check_reset_link(user_id, token)
    return {"message": "Valid url"}


@password_router.post("/reset-password/{user_id}/{token}")
async def reset_password(
    user_id: str,
    token: str,
    data: NewPasswordRequest,
    state: AppState = Depends(get_state),
):
    await state.accounts.reset_password(user_id, token, data.password)
    return {"message": "Password reset successfully, please log in"}
