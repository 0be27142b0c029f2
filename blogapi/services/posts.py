"""
Post service - CRUD, image replacement and likes.

Edits are owner-only (admins moderate by deleting, not editing).
Deletion is owner-or-admin and goes through the cascade coordinator.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from blogapi.auth.context import Claim
from blogapi.auth.policies import Policy, check
from blogapi.core.errors import NotFound, ValidationError
from blogapi.core.models import Comment, Post, PostDetail, User, UserResponse, toggle_like
from blogapi.core.utils import utc_now
from blogapi.services.cascade import CascadeCoordinator, CascadeReport
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1)]


class PostService:
    def __init__(
        self,
        storage: StorageProvider,
        cascade: CascadeCoordinator,
        posts_per_page: int = 4,
    ):
        self.storage = storage
        self.cascade = cascade
        self.posts_per_page = posts_per_page

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_model(self, post_id: str) -> Post:
        data = await self.storage.metadata.get(Collections.POSTS, post_id)
        if not data:
            raise NotFound("Post not found")
        return Post.model_validate(data)

    async def _require_caller(self, claim: Claim) -> None:
        # Tokens outlive accounts; a deleted user must not create orphans
        if not await self.storage.metadata.get(Collections.USERS, claim.user_id):
            raise NotFound("User not found")

    async def _comments_of(self, post_id: str) -> list[Comment]:
        docs = await self.storage.metadata.query(
            Collections.COMMENTS, {"post_id": post_id}, sort=NEWEST_FIRST
        )
        return [Comment.model_validate(d) for d in docs]

    async def list_posts(
        self,
        page_number: int | None = None,
        category: str | None = None,
    ) -> list[PostDetail]:
        """
        Newest first, with comments embedded.

        `page_number` (1-based) takes precedence over `category`.
        """
        if page_number is not None and page_number < 1:
            raise ValidationError("page_number must be 1 or more")

        filters: dict[str, Any] = {}
        limit = None
        offset = 0
        if page_number is not None:
            limit = self.posts_per_page
            offset = (page_number - 1) * self.posts_per_page
        elif category:
            filters["category"] = category

        docs = await self.storage.metadata.query(
            Collections.POSTS, filters, sort=NEWEST_FIRST, limit=limit, offset=offset
        )
        return [
            PostDetail(**Post.model_validate(d).model_dump(), comments=await self._comments_of(d["id"]))
            for d in docs
        ]

    async def count_posts(self) -> int:
        return await self.storage.metadata.count(Collections.POSTS)

    async def get_post(self, post_id: str) -> PostDetail:
        """A post with its author (no password hash) and comments."""
        post = await self.get_model(post_id)

        author = None
        author_data = await self.storage.metadata.get(Collections.USERS, post.user_id)
        if author_data:
            author = UserResponse.from_user(User.model_validate(author_data))

        return PostDetail(
            **post.model_dump(),
            user=author,
            comments=await self._comments_of(post.id),
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_post(
        self,
        claim: Claim,
        title: str,
        description: str,
        category: str,
        image_path: str | Path,
    ) -> Post:
        await self._require_caller(claim)
        image = await self.storage.blobs.upload(image_path)
        post = Post(
            title=title,
            description=description,
            category=category,
            user_id=claim.user_id,
            image=image,
        )
        await self.storage.metadata.save(Collections.POSTS, post.id, post.model_dump())
        logger.info(f"Post created: {post.id} by {claim.user_id}")
        return post

    async def update_post(self, claim: Claim, post_id: str, fields: dict[str, Any]) -> Post:
        """Owner-only edit of title/description/category."""
        post = await self.get_model(post_id)
        check(claim, Policy.self_only(post.owner_id))

        updates = {k: v for k, v in fields.items() if v is not None}
        updates["updated_at"] = utc_now()
        data = await self.storage.metadata.update(Collections.POSTS, post.id, updates)
        if not data:
            raise NotFound("Post not found")
        return Post.model_validate(data)

    async def update_image(self, claim: Claim, post_id: str, image_path: str | Path) -> Post:
        """Owner-only image replacement: old blob removed, new one uploaded."""
        post = await self.get_model(post_id)
        check(claim, Policy.self_only(post.owner_id))

        if post.image.public_id:
            await self.storage.blobs.remove(post.image.public_id)
        image = await self.storage.blobs.upload(image_path)

        data = await self.storage.metadata.update(Collections.POSTS, post.id, {
            "image": image.model_dump(),
            "updated_at": utc_now(),
        })
        if not data:
            raise NotFound("Post not found")
        return Post.model_validate(data)

    async def toggle_like(self, claim: Claim, post_id: str) -> Post:
        """Like if not yet liked by the caller, otherwise unlike."""
        await self._require_caller(claim)
        post = await self.get_model(post_id)
        data = await self.storage.metadata.update(Collections.POSTS, post.id, {
            "likes": toggle_like(post.likes, claim.user_id),
        })
        if not data:
            raise NotFound("Post not found")
        return Post.model_validate(data)

    async def delete_post(self, claim: Claim, post_id: str) -> CascadeReport:
        """Owner or admin. Removes the image and all comments too."""
        post = await self.get_model(post_id)
        check(claim, Policy.owner_or_admin(), post)

        report = await self.cascade.delete_post(post.id)
        logger.info(f"Post deleted: {post.id} by {claim.user_id} {report.counts}")
        return report
