"""
User service - profiles, listing and account deletion.

Route-level policies (admin-only listing, self-only edit, self-or-admin
delete) are enforced by the router before these methods run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from blogapi.auth.context import Claim
from blogapi.auth.passwords import hash_password
from blogapi.core.errors import NotFound
from blogapi.core.models import ImageRef, Post, User, UserResponse
from blogapi.core.utils import utc_now
from blogapi.services.cascade import CascadeCoordinator, CascadeReport
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, storage: StorageProvider, cascade: CascadeCoordinator):
        self.storage = storage
        self.cascade = cascade

    async def get_model(self, user_id: str) -> User:
        data = await self.storage.metadata.get(Collections.USERS, user_id)
        if not data:
            raise NotFound("User not found")
        return User.model_validate(data)

    async def _posts_of(self, user_id: str) -> list[Post]:
        docs = await self.storage.metadata.query(
            Collections.POSTS, {"user_id": user_id}, sort=[("created_at", -1)]
        )
        return [Post.model_validate(d) for d in docs]

    async def list_users(self) -> list[UserResponse]:
        docs = await self.storage.metadata.query(Collections.USERS, sort=[("created_at", 1)])
        users = [User.model_validate(d) for d in docs]
        return [UserResponse.from_user(u, await self._posts_of(u.id)) for u in users]

    async def get_user(self, user_id: str) -> UserResponse:
        user = await self.get_model(user_id)
        return UserResponse.from_user(user, await self._posts_of(user.id))

    async def count_users(self) -> int:
        return await self.storage.metadata.count(Collections.USERS)

    async def update_user(
        self,
        user_id: str,
        username: str | None = None,
        password: str | None = None,
        bio: str | None = None,
    ) -> UserResponse:
        """Update profile fields; a new password is re-hashed."""
        await self.get_model(user_id)

        updates: dict[str, Any] = {"updated_at": utc_now()}
        if username is not None:
            updates["username"] = username
        if bio is not None:
            updates["bio"] = bio
        if password is not None:
            updates["password_hash"] = hash_password(password)

        data = await self.storage.metadata.update(Collections.USERS, user_id, updates)
        if not data:
            raise NotFound("User not found")
        user = User.model_validate(data)
        return UserResponse.from_user(user, await self._posts_of(user.id))

    async def upload_profile_photo(self, claim: Claim, image_path: str | Path) -> ImageRef:
        """Replace the caller's profile photo, removing the previous upload."""
        user = await self.get_model(claim.user_id)

        image = await self.storage.blobs.upload(image_path)
        if user.profile_photo.public_id:
            await self.storage.blobs.remove(user.profile_photo.public_id)

        await self.storage.metadata.update(Collections.USERS, user.id, {
            "profile_photo": image.model_dump(),
            "updated_at": utc_now(),
        })
        return image

    async def delete_user(self, user_id: str) -> CascadeReport:
        report = await self.cascade.delete_user(user_id)
        logger.info(f"User deleted: {user_id} {report.counts}")
        return report
