"""
Verification tokens - single-use secrets mailed to the account owner.

An account goes Unverified -> Verified exactly once. The token that
proves it is deleted on use, so presenting it again is NotFound. The
same tokens back password-reset links.
"""

from __future__ import annotations

import logging

from blogapi.core.errors import NotFound
from blogapi.core.models import User, VerificationToken
from blogapi.core.utils import utc_now
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


class VerificationService:
    """Find-or-create, check and consume verification tokens."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    async def create(self, user_id: str) -> VerificationToken:
        token = VerificationToken(user_id=user_id)
        await self.storage.metadata.save(
            Collections.VERIFICATION_TOKENS, token.id, token.model_dump()
        )
        return token

    async def find(self, user_id: str, secret: str | None = None) -> VerificationToken | None:
        filters = {"user_id": user_id}
        if secret is not None:
            filters["token"] = secret
        docs = await self.storage.metadata.query(
            Collections.VERIFICATION_TOKENS, filters, limit=1
        )
        return VerificationToken.model_validate(docs[0]) if docs else None

    async def find_or_create(self, user_id: str) -> VerificationToken:
        """
        Reuse a pending token for this user, or mint one.

        Does not stop two concurrent callers from both creating one.
        """
        existing = await self.find(user_id)
        if existing:
            return existing
        return await self.create(user_id)

    async def require(self, user_id: str, secret: str) -> tuple[User, VerificationToken]:
        """Look up the user and their matching token, NotFound if either is missing."""
        data = await self.storage.metadata.get(Collections.USERS, user_id)
        if not data:
            raise NotFound("Invalid link")

        token = await self.find(user_id, secret)
        if not token:
            raise NotFound("Invalid link")

        return User.model_validate(data), token

    async def consume(self, token: VerificationToken) -> None:
        await self.storage.metadata.delete(Collections.VERIFICATION_TOKENS, token.id)

    async def verify_account(self, user_id: str, secret: str) -> User:
        """
        Mark the account verified and burn the token.

        Raises:
            NotFound: unknown user, or no such (or already used) token
        """
        user, token = await self.require(user_id, secret)

        updated = await self.storage.metadata.update(
            Collections.USERS, user.id,
            {"is_account_verified": True, "updated_at": utc_now()},
        )
        await self.consume(token)

        logger.info(f"Account verified: {user.id}")
        return User.model_validate(updated)
