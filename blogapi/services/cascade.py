"""
Cascade coordinator - keeps references consistent when parents are deleted.

Deleting a post removes its image and its comments. Deleting a user
removes their posts (and those posts' images) and their comments.

Each delete is a fixed sequence of steps run in order, children before
parents. There is no cross-collection transaction: if a step fails the
remaining steps are skipped, finished steps stay finished, and a
PartialFailure names what completed so it can be repaired by hand.

Known gap (kept on purpose, see `cascade_foreign_comments`): deleting a
user deletes their posts and *their own* comments, but comments other
users left on those posts still point at the deleted post ids. Setting
`cascade_foreign_comments=True` adds a step that removes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from blogapi.core.errors import NotFound, PartialFailure
from blogapi.core.models import Post, User
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)

# A step returns how many records/blobs it touched
Step = tuple[str, Callable[[], Awaitable[int]]]


@dataclass
class CascadeReport:
    """Which steps of a cascade ran, and what each one removed."""

    target: str
    completed_steps: list[str] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)


class CascadeCoordinator:
    """Runs the delete-post and delete-user sequences."""

    def __init__(self, storage: StorageProvider, cascade_foreign_comments: bool = False):
        self.storage = storage
        self.cascade_foreign_comments = cascade_foreign_comments

    # =========================================================================
    # Sequences
    # =========================================================================

    async def delete_post(self, post_id: str) -> CascadeReport:
        """
        Delete a post and everything hanging off it.

        Steps: remove image, delete comments on the post, delete the post.

        Raises:
            NotFound: no such post (nothing is touched)
            PartialFailure: a step failed after the post was located
        """
        data = await self.storage.metadata.get(Collections.POSTS, post_id)
        if not data:
            raise NotFound("Post not found")
        post = Post.model_validate(data)

        async def remove_image() -> int:
            if not post.image.public_id:
                return 0
            await self.storage.blobs.remove(post.image.public_id)
            return 1

        steps: list[Step] = [
            ("remove_image", remove_image),
            ("delete_comments", lambda: self.storage.metadata.delete_many(
                Collections.COMMENTS, {"post_id": post_id}
            )),
            ("delete_post", lambda: self._delete_one(Collections.POSTS, post_id)),
        ]
        return await self._run(f"post:{post_id}", steps)

    async def delete_user(self, user_id: str) -> CascadeReport:
        """
        Delete a user account and everything they own.

        Steps: batch-remove images of the user's posts, delete the
        user's posts, [delete other users' comments on those posts],
        delete the user's comments, delete the user.

        Raises:
            NotFound: no such user (nothing is touched)
            PartialFailure: a step failed after the user was located
        """
        data = await self.storage.metadata.get(Collections.USERS, user_id)
        if not data:
            raise NotFound("User not found")
        user = User.model_validate(data)

        post_ids: list[str] = []

        async def remove_post_images() -> int:
            posts = await self.storage.metadata.query(Collections.POSTS, {"user_id": user.id})
            post_ids.extend(p["id"] for p in posts)
            public_ids = [
                p["image"]["public_id"] for p in posts
                if p.get("image") and p["image"].get("public_id")
            ]
            if public_ids:
                await self.storage.blobs.remove_many(public_ids)
            return len(public_ids)

        async def delete_post_comments() -> int:
            if not post_ids:
                return 0
            return await self.storage.metadata.delete_many(
                Collections.COMMENTS, {"post_id": post_ids}
            )

        steps: list[Step] = [
            ("remove_post_images", remove_post_images),
            ("delete_posts", lambda: self.storage.metadata.delete_many(
                Collections.POSTS, {"user_id": user.id}
            )),
        ]
        if self.cascade_foreign_comments:
            steps.append(("delete_post_comments", delete_post_comments))
        steps += [
            ("delete_comments", lambda: self.storage.metadata.delete_many(
                Collections.COMMENTS, {"user_id": user.id}
            )),
            ("delete_user", lambda: self._delete_one(Collections.USERS, user.id)),
        ]
        return await self._run(f"user:{user.id}", steps)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _delete_one(self, collection: str, id: str) -> int:
        return 1 if await self.storage.metadata.delete(collection, id) else 0

    async def _run(self, target: str, steps: list[Step]) -> CascadeReport:
        report = CascadeReport(target=target)

        for name, action in steps:
            try:
                count = await action()
            except Exception as e:
                logger.error(
                    f"Cascade {target} aborted at '{name}' "
                    f"(completed: {report.completed_steps}): {e}"
                )
                raise PartialFailure(target, report.completed_steps, name) from e

            report.completed_steps.append(name)
            report.counts[name] = count
            logger.info(f"Cascade {target}: {name} ({count})")

        return report
