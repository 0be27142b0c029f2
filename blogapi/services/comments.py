"""
Comment service.

Edit is author-only; admins may delete any comment but may not edit one.
"""

from __future__ import annotations

import logging

from blogapi.auth.context import Claim
from blogapi.auth.policies import Policy, check
from blogapi.core.errors import NotFound
from blogapi.core.models import Comment, User
from blogapi.core.utils import utc_now
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, storage: StorageProvider):
        self.storage = storage

    async def get_model(self, comment_id: str) -> Comment:
        data = await self.storage.metadata.get(Collections.COMMENTS, comment_id)
        if not data:
            raise NotFound("Comment not found")
        return Comment.model_validate(data)

    async def list_comments(self) -> list[Comment]:
        docs = await self.storage.metadata.query(
            Collections.COMMENTS, sort=[("created_at", -1)]
        )
        return [Comment.model_validate(d) for d in docs]

    async def create_comment(self, claim: Claim, post_id: str, text: str) -> Comment:
        """
        Comment on an existing post as the caller.

        Raises:
            NotFound: the post (or the caller's account) does not exist
        """
        if not await self.storage.metadata.get(Collections.POSTS, post_id):
            raise NotFound("Post not found")

        profile = await self.storage.metadata.get(Collections.USERS, claim.user_id)
        if not profile:
            raise NotFound("User not found")

        comment = Comment(
            post_id=post_id,
            user_id=claim.user_id,
            text=text,
            username=User.model_validate(profile).username,
        )
        await self.storage.metadata.save(Collections.COMMENTS, comment.id, comment.model_dump())
        return comment

    async def update_comment(self, claim: Claim, comment_id: str, text: str) -> Comment:
        comment = await self.get_model(comment_id)
        check(claim, Policy.self_only(comment.owner_id))

        data = await self.storage.metadata.update(Collections.COMMENTS, comment.id, {
            "text": text,
            "updated_at": utc_now(),
        })
        if not data:
            raise NotFound("Comment not found")
        return Comment.model_validate(data)

    async def delete_comment(self, claim: Claim, comment_id: str) -> None:
        comment = await self.get_model(comment_id)
        check(claim, Policy.owner_or_admin(), comment)

        await self.storage.metadata.delete(Collections.COMMENTS, comment.id)
        logger.info(f"Comment deleted: {comment.id} by {claim.user_id}")
