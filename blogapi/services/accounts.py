"""
Account service - registration, login and password reset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from blogapi.auth.passwords import hash_password, verify_password
from blogapi.auth.tokens import TokenIssuer
from blogapi.core.errors import InvalidCredentials, VerificationRequired
from blogapi.core.models import User
from blogapi.core.utils import utc_now
from blogapi.integrations.email import EmailService
from blogapi.services.verification import VerificationService
from blogapi.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    user: User
    token: str


class AccountService:
    """Owns the credential side of users."""

    def __init__(
        self,
        storage: StorageProvider,
        tokens: TokenIssuer,
        verification: VerificationService,
        notifier: EmailService,
    ):
        self.storage = storage
        self.tokens = tokens
        self.verification = verification
        self.notifier = notifier

    async def get_by_email(self, email: str) -> User | None:
        docs = await self.storage.metadata.query(
            Collections.USERS, {"email": email.strip().lower()}, limit=1
        )
        return User.model_validate(docs[0]) if docs else None

    async def register(self, username: str, email: str, password: str) -> User:
        """
        Create an unverified account and mail the verification link.

        Raises:
            Conflict: the email is already registered
        """
        user = User(
            username=username,
            email=email.strip().lower(),
            password_hash=hash_password(password),
        )
        await self.storage.metadata.save(
            Collections.USERS, user.id, user.model_dump(), unique=("email",)
        )
        logger.info(f"User registered: {user.id}")

        token = await self.verification.create(user.id)
        await self._notify_verification(user, token.token)
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue a token.

        Raises:
            InvalidCredentials: unknown email or wrong password
            VerificationRequired: credentials fine, email not verified yet
                (a verification link has been (re)sent)
        """
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid email or password")

        if not user.is_account_verified:
            token = await self.verification.find_or_create(user.id)
            await self._notify_verification(user, token.token)
            raise VerificationRequired(
                "We sent you an email, please verify your email address"
            )

        return LoginResult(user=user, token=self.tokens.issue(user))

    async def verify_account(self, user_id: str, secret: str) -> User:
        return await self.verification.verify_account(user_id, secret)

    # =========================================================================
    # Password reset
    # =========================================================================

    async def request_password_reset(self, email: str) -> None:
        """
        Mail a reset link if the email is registered.

        Silent when it is not, so callers can't probe for accounts.
        """
        user = await self.get_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        token = await self.verification.find_or_create(user.id)
        try:
            await self.notifier.send_password_reset(user.email, user.id, token.token)
        except Exception as e:
            logger.warning(f"Password reset email to {user.id} failed: {e}")

    async def check_reset_link(self, user_id: str, secret: str) -> None:
        """NotFound unless the link is still valid."""
        await self.verification.require(user_id, secret)

    async def reset_password(self, user_id: str, secret: str, password: str) -> None:
        """
        Set a new password from a reset link and burn the token.

        Following a mailed link also proves the address, so the account
        becomes verified.
        """
        user, token = await self.verification.require(user_id, secret)

        await self.storage.metadata.update(Collections.USERS, user.id, {
            "password_hash": hash_password(password),
            "is_account_verified": True,
            "updated_at": utc_now(),
        })
        await self.verification.consume(token)
        logger.info(f"Password reset for {user.id}")

    # =========================================================================
    # Internals
    # =========================================================================

    async def _notify_verification(self, user: User, secret: str) -> None:
        # Best effort: the account change has already been stored
        try:
            await self.notifier.send_verification(user.email, user.username, user.id, secret)
        except Exception as e:
            logger.warning(f"Verification email to {user.id} failed: {e}")
