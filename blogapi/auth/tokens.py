# =============================================================================
# JWT Token Issuer / Verifier
# =============================================================================
#
# Tokens carry {id, role}. They do not expire unless
# TokenConfig.expire_minutes is set (JWT_EXPIRE_MINUTES in the env).
#
# The issuer is built from an explicit TokenConfig; nothing here reads
# global settings.
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import timedelta

import jwt

from blogapi.auth.context import Claim
from blogapi.config import TokenConfig
from blogapi.core.models import Role, User
from blogapi.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class InvalidToken(Exception):
    """Token is missing, malformed, tampered with or expired."""
    pass


class TokenExpired(InvalidToken):
    """Token has expired."""
    pass


# =============================================================================
# Issuer
# =============================================================================

class TokenIssuer:
    """Mints and validates signed identity assertions."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, user: User) -> str:
        """Create a signed token for this user."""
        now = utc_now()
        payload = {
            "id": user.id,
            "role": user.role.value,
            "iat": now,
        }
        if self.config.expire_minutes is not None:
            payload["exp"] = now + timedelta(minutes=self.config.expire_minutes)

        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str | None) -> Claim:
        """
        Decode and validate a token.

        Raises:
            TokenExpired: Token has an `exp` in the past
            InvalidToken: Anything else wrong with it
        """
        if not token:
            raise InvalidToken("No token provided")

        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Invalid token: {e}")

        user_id = payload.get("id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken("Token has no subject")

        try:
            role = Role(payload.get("role"))
        except ValueError:
            raise InvalidToken(f"Unknown role: {payload.get('role')!r}")

        return Claim(user_id=user_id, role=role)
