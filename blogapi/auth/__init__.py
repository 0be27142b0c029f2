"""
Authentication and authorization.

Design principles:
1. Tokens are minted/checked by a TokenIssuer built from explicit config
2. One pure decision function, `authorize()`, over a closed set of policies
3. Route-level policies via `Depends(require(...))`, ownership policies
   via `check()` in the services once the resource is loaded

The HTTP routes live in `blogapi.auth.routes`.
"""

from blogapi.auth.context import Claim
from blogapi.auth.passwords import (
    check_password_complexity,
    hash_password,
    verify_password,
)
from blogapi.auth.policies import (
    DenyReason,
    Owned,
    Policy,
    PolicyKind,
    Verdict,
    authorize,
    check,
    enforce,
    get_claim,
    require,
    require_admin,
    require_auth,
)
from blogapi.auth.tokens import InvalidToken, TokenExpired, TokenIssuer

__all__ = [
    # Decision
    "authorize",
    "enforce",
    "check",
    "Policy",
    "PolicyKind",
    "Verdict",
    "DenyReason",
    "Owned",
    "Claim",
    # FastAPI
    "get_claim",
    "require",
    "require_auth",
    "require_admin",
    # Tokens
    "TokenIssuer",
    "InvalidToken",
    "TokenExpired",
    # Passwords
    "hash_password",
    "verify_password",
    "check_password_complexity",
]
