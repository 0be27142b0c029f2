"""
Policies - who may act on which resource.

There is exactly one decision function, `authorize()`. It is pure: it
takes the caller's claim, a policy and (for ownership policies) the
already-fetched resource, and returns a Verdict. It never touches the
database, so routes and services fetch ownership first and pass it in.

Routes whose policy depends only on the path use the `require()`
dependency:

    @router.delete("/{id}")
    async def delete_user(
        id: str,
        claim: Claim = Depends(require(PolicyKind.SELF_OR_ADMIN)),
    ):
        ...

Ownership checks happen in the services via `check()`:

    post = await self._get(post_id)
    check(claim, Policy.owner_or_admin(), post)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blogapi.auth.context import Claim
from blogapi.auth.tokens import InvalidToken, TokenIssuer
from blogapi.core.errors import Forbidden, Unauthenticated
from blogapi.integrations.sentry import set_user


# =============================================================================
# Types
# =============================================================================


class PolicyKind(str, Enum):
    """The closed set of access rules."""

    PUBLIC = "public"                        # Anyone, no token needed
    ANY_AUTHENTICATED = "any_authenticated"  # Any valid token
    SELF_ONLY = "self_only"                  # claim.id == subject_id
    SELF_OR_ADMIN = "self_or_admin"          # claim.id == subject_id, or admin
    OWNER_OR_ADMIN = "owner_or_admin"        # claim.id == resource.owner_id, or admin
    ADMIN_ONLY = "admin_only"                # Admins only


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


class Owned(Protocol):
    """Anything with an owner (posts, comments)."""

    @property
    def owner_id(self) -> str: ...


@dataclass(frozen=True)
class Policy:
    """
    A policy instance: the rule plus the id it is checked against.

    Build with the constructors rather than directly:
        Policy.self_only(user_id)
        Policy.owner_or_admin()
    """

    kind: PolicyKind
    subject_id: str | None = None

    @classmethod
    def public(cls) -> Policy:
        return cls(PolicyKind.PUBLIC)

    @classmethod
    def any_authenticated(cls) -> Policy:
        return cls(PolicyKind.ANY_AUTHENTICATED)

    @classmethod
    def self_only(cls, subject_id: str) -> Policy:
        return cls(PolicyKind.SELF_ONLY, subject_id)

    @classmethod
    def self_or_admin(cls, subject_id: str) -> Policy:
        return cls(PolicyKind.SELF_OR_ADMIN, subject_id)

    @classmethod
    def owner_or_admin(cls) -> Policy:
        return cls(PolicyKind.OWNER_OR_ADMIN)

    @classmethod
    def admin_only(cls) -> Policy:
        return cls(PolicyKind.ADMIN_ONLY)


@dataclass(frozen=True)
class Verdict:
    """Result of `authorize()`. `reason` is set only when denied."""

    allowed: bool
    reason: DenyReason | None = None
    message: str | None = None

    @classmethod
    def allow(cls) -> Verdict:
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str) -> Verdict:
        return cls(False, reason, message)


# =============================================================================
# The decision function
# =============================================================================


_RULES: dict[PolicyKind, Callable[[Claim, Policy, Owned | None], bool]] = {
    PolicyKind.ANY_AUTHENTICATED: lambda claim, policy, resource: True,
    PolicyKind.SELF_ONLY: lambda claim, policy, resource: (
        claim.user_id == policy.subject_id
    ),
    PolicyKind.SELF_OR_ADMIN: lambda claim, policy, resource: (
        claim.user_id == policy.subject_id or claim.is_admin
    ),
    PolicyKind.OWNER_OR_ADMIN: lambda claim, policy, resource: (
        resource is not None and (claim.user_id == resource.owner_id or claim.is_admin)
    ),
    PolicyKind.ADMIN_ONLY: lambda claim, policy, resource: claim.is_admin,
}

_DENY_MESSAGES: dict[PolicyKind, str] = {
    PolicyKind.SELF_ONLY: "Access denied, only the user himself is allowed",
    PolicyKind.SELF_OR_ADMIN: "Access denied, only the user himself or an admin is allowed",
    PolicyKind.OWNER_OR_ADMIN: "Access denied, only the owner or an admin is allowed",
    PolicyKind.ADMIN_ONLY: "Access denied, only admins are allowed",
}


def authorize(
    claim: Claim | None,
    policy: Policy,
    resource: Owned | None = None,
) -> Verdict:
    """
    Decide whether `claim` may act under `policy`.

    A missing claim is UNAUTHENTICATED for every policy except PUBLIC.
    OWNER_OR_ADMIN without a resource is FORBIDDEN.
    """
    if policy.kind == PolicyKind.PUBLIC:
        return Verdict.allow()

    if claim is None:
        return Verdict.deny(DenyReason.UNAUTHENTICATED, "Authentication required")

    if _RULES[policy.kind](claim, policy, resource):
        return Verdict.allow()

    return Verdict.deny(DenyReason.FORBIDDEN, _DENY_MESSAGES[policy.kind])


def enforce(verdict: Verdict) -> None:
    """Raise the error matching a deny verdict."""
    if verdict.allowed:
        return
    if verdict.reason == DenyReason.UNAUTHENTICATED:
        raise Unauthenticated(verdict.message or "Authentication required")
    raise Forbidden(verdict.message or "Access denied")


def check(claim: Claim | None, policy: Policy, resource: Owned | None = None) -> None:
    """`authorize()` then `enforce()`."""
    enforce(authorize(claim, policy, resource))


# =============================================================================
# FastAPI dependencies
# =============================================================================


# Optional JWT bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)


async def get_claim(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> Claim | None:
    """
    Extract the claim from the Authorization header.

    No header means anonymous (None). A header with a bad token is
    rejected outright rather than treated as anonymous.
    """
    if not credentials:
        return None

    issuer: TokenIssuer = request.app.state.tokens
    try:
        claim = issuer.verify(credentials.credentials)
    except InvalidToken as e:
        raise Unauthenticated(str(e))

    set_user(claim.user_id)
    return claim


_PATH_SUBJECT_KINDS = {PolicyKind.SELF_ONLY, PolicyKind.SELF_OR_ADMIN}


def require(kind: PolicyKind, param: str = "id") -> Callable:
    """
    Build a dependency that enforces a route-level policy.

    For SELF_ONLY / SELF_OR_ADMIN the subject is the path parameter
    named `param`. OWNER_OR_ADMIN needs the resource and is checked in
    the service layer instead.

    Returns:
        FastAPI dependency resolving to the caller's Claim
    """
    if kind == PolicyKind.OWNER_OR_ADMIN:
        raise ValueError("OWNER_OR_ADMIN needs the resource; use check() in the service")

    async def dependency(
        request: Request,
        claim: Claim | None = Depends(get_claim),
    ) -> Claim | None:
        subject_id = request.path_params.get(param) if kind in _PATH_SUBJECT_KINDS else None
        check(claim, Policy(kind, subject_id))
        return claim

    return dependency


def require_auth() -> Callable:
    """Just require a valid token."""
    return require(PolicyKind.ANY_AUTHENTICATED)


def require_admin() -> Callable:
    """Require an admin token."""
    return require(PolicyKind.ADMIN_ONLY)
