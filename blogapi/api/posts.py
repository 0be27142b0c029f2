"""
Post routes.

    GET    /posts                     public (?page_number= | ?category=)
    POST   /posts                     any logged-in user (multipart, with image)
    GET    /posts/count               public
    GET    /posts/{post_id}           public
    PUT    /posts/{post_id}           owner only
    DELETE /posts/{post_id}           owner or admin
    PUT    /posts/update-image/{post_id}  owner only
    PUT    /posts/like/{post_id}      any logged-in user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from blogapi.api.deps import get_state, parse, saved_upload
from blogapi.api.state import AppState
from blogapi.auth.context import Claim
from blogapi.auth.policies import require_auth
from blogapi.core.models import Post, PostDetail

router = APIRouter(prefix="/posts", tags=["posts"])


class PostCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=2, max_length=200)
    description: str = Field(min_length=10)
    category: str = Field(min_length=1)


class PostUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, min_length=10)
    category: str | None = Field(default=None, min_length=1)


@router.get("", response_model=list[PostDetail])
async def list_posts(
    page_number: int | None = Query(default=None, ge=1),
    category: str | None = None,
    state: AppState = Depends(get_state),
):
    return await state.posts.list_posts(page_number=page_number, category=category)


@router.post("", status_code=201, response_model=Post)
async def create_post(
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    image: UploadFile | None = File(None),
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    data = parse(PostCreate, title=title, description=description, category=category)
    async with saved_upload(image, state.settings.upload_dir) as path:
        return await state.posts.create_post(
            claim,
            title=data.title,
            description=data.description,
            category=data.category,
            image_path=path,
        )


@router.get("/count")
async def count_posts(state: AppState = Depends(get_state)):
    return await state.posts.count_posts()


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: str, state: AppState = Depends(get_state)):
    return await state.posts.get_post(post_id)


@router.put("/{post_id}", response_model=Post)
async def update_post(
    post_id: str,
    data: PostUpdate,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.posts.update_post(claim, post_id, data.model_dump(exclude_none=True))


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    report = await state.posts.delete_post(claim, post_id)
    return {
        "message": "Post has been deleted successfully",
        "post_id": post_id,
        "completed_steps": report.completed_steps,
    }


@router.put("/update-image/{post_id}", response_model=Post)
async def update_post_image(
    post_id: str,
    image: UploadFile | None = File(None),
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    async with saved_upload(image, state.settings.upload_dir) as path:
        return await state.posts.update_image(claim, post_id, path)


@router.put("/like/{post_id}", response_model=Post)
async def toggle_like(
    post_id: str,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.posts.toggle_like(claim, post_id)
