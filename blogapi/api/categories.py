"""
Category routes.

    GET    /categories                 public
    POST   /categories                 any logged-in user
    DELETE /categories/{category_id}   admin only
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from blogapi.api.deps import get_state
from blogapi.api.state import AppState
from blogapi.auth.context import Claim
from blogapi.auth.policies import require_admin, require_auth
from blogapi.core.models import Category

router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)


@router.get("", response_model=list[Category])
async def list_categories(state: AppState = Depends(get_state)):
    return await state.categories.list_categories()


@router.post("", status_code=201, response_model=Category)
async def create_category(
    data: CategoryCreate,
    claim: Claim = Depends(require_auth()),
    state: AppState = Depends(get_state),
):
    return await state.categories.create_category(claim, data.title)


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    claim: Claim = Depends(require_admin()),
    state: AppState = Depends(get_state),
):
    category = await state.categories.delete_category(category_id)
    return {
        "message": "Category has been deleted successfully",
        "category_id": category.id,
    }
