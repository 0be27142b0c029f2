"""
Category service.

Posts store the category *title*, so deleting a category leaves existing
posts untouched.
"""

from __future__ import annotations

from blogapi.auth.context import Claim
from blogapi.core.errors import NotFound
from blogapi.core.models import Category
from blogapi.storage.base import Collections, StorageProvider


class CategoryService:
    def __init__(self, storage: StorageProvider):
        self.storage = storage

    async def list_categories(self) -> list[Category]:
        docs = await self.storage.metadata.query(
            Collections.CATEGORIES, sort=[("created_at", 1)]
        )
        return [Category.model_validate(d) for d in docs]

    async def create_category(self, claim: Claim, title: str) -> Category:
        if not await self.storage.metadata.get(Collections.USERS, claim.user_id):
            raise NotFound("User not found")

        category = Category(title=title, user_id=claim.user_id)
        await self.storage.metadata.save(
            Collections.CATEGORIES, category.id, category.model_dump()
        )
        return category

    async def delete_category(self, category_id: str) -> Category:
        data = await self.storage.metadata.get(Collections.CATEGORIES, category_id)
        if not data:
            raise NotFound("Category not found")
        await self.storage.metadata.delete(Collections.CATEGORIES, category_id)
        return Category.model_validate(data)
