"""
Comment routes.

    GET    /comments                any logged-in user
    POST   /comments                any logged-in user
    PUT    /comments/{comment_id}   author only (admins can't edit)
    DELETE /comments/{comment_id}   author or admin
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from blogapi.api.deps import get_state
from blogapi.api.state import AppState
from blogapi.auth.context import Claim
from blogapi.auth.policies import require_auth
from blogapi.core.models import Comment

router = APIRouter(prefix="/comments", tags=["comments"])


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    post_id: str = Field(min_length=1, validation_alias=AliasChoices("post_id", "postId"))
    text: str = Field(min_length=1)


class CommentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1)


@router.get("", response_model=list[Comment])
async def list_comments(
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.comments.list_comments()


@router.post("", status_code=201, response_model=Comment)
async def create_comment(
    data: CommentCreate,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.comments.create_comment(claim, data.post_id, data.text)


@router.put("/{comment_id}", response_model=Comment)
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.comments.update_comment(claim, comment_id, data.text)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    await state.comments.delete_comment(claim, comment_id)
    return {"message": "Comment has been deleted", "comment_id": comment_id}
