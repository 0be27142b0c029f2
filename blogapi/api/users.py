"""
User routes.

    GET    /users                  admin only
    GET    /users/count            admin only
    POST   /users/profile-photo    any logged-in user (their own photo)
    GET    /users/{user_id}        public
    PUT    /users/{user_id}        the user himself (no admin override)
    DELETE /users/{user_id}        the user himself or an admin
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogapi.api.deps import get_state, saved_upload
from blogapi.api.state import AppState
from blogapi.auth.context import Claim
from blogapi.auth.passwords import check_password_complexity
from blogapi.auth.policies import PolicyKind, require, require_admin, require_auth
from blogapi.core.models import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str | None = Field(default=None, min_length=3, max_length=50)
    bio: str | None = None
    password: str | None = None

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str | None) -> str | None:
        return check_password_complexity(value) if value is not None else None


@router.get("", response_model=list[UserResponse])
async def list_users(
    claim: Claim = Depends(require_admin()),
    state: AppState = Depends(get_state),
):
    return await state.users.list_users()


@router.get("/count")
async def count_users(
    claim: Claim = Depends(require_admin()),
    state: AppState = Depends(get_state),
):
    return await state.users.count_users()


@router.post("/profile-photo")
async def upload_profile_photo(
    image: UploadFile | None = File(None),
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    async with saved_upload(image, state.settings.upload_dir) as path:
        photo = await state.users.upload_profile_photo(claim, path)
    return {
        "message": "Your profile photo uploaded successfully",
        "profile_photo": photo,
    }


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, state: AppState = Depends(get_state)):
    return await state.users.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    claim: Claim = Depends(require(PolicyKind.SELF_ONLY, param="user_id")),
    state: AppState = Depends(get_state),
):
    return await state.users.update_user(
        user_id,
        username=data.username,
        password=data.password,
        bio=data.bio,
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    claim: Claim = Depends(require(PolicyKind.SELF_OR_ADMIN, param="user_id")),
    state: AppState = Depends(get_state),
):
    """Delete the account with its posts, post images and comments."""
    report = await state.users.delete_user(user_id)
    return {
        "message": "User deleted successfully",
        "user_id": user_id,
        "completed_steps": report.completed_steps,
    }
