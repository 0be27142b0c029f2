"""
Claim - who is making the request.

This is the small, immutable object recovered from a verified token and
handed to the authorization engine and the services.
"""

from __future__ import annotations

from dataclasses import dataclass

from blogapi.core.models import Role


@dataclass(frozen=True)
class Claim:
    """
    Identity and role of the caller.

    Usage in routes:
        async def my_route(claim: Claim = Depends(require(PolicyKind.ANY_AUTHENTICATED))):
            print(f"User {claim.user_id} is admin: {claim.is_admin}")
    """

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
