"""
Error taxonomy.

Every failure the API can report is one of these. Each carries the HTTP
status and a machine-readable code; a single exception handler in the
app turns them into `{"message": ..., "code": ...}` responses.
"""

from __future__ import annotations


class BlogError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class ValidationError(BlogError):
    """Malformed input."""

    status_code = 400
    code = "validation_error"


class Conflict(BlogError):
    """Duplicate value for a unique field."""

    status_code = 400
    code = "conflict"


class InvalidCredentials(BlogError):
    """Wrong email or password at login."""

    status_code = 400
    code = "invalid_credentials"


class Unauthenticated(BlogError):
    """Missing or invalid token."""

    status_code = 401
    code = "unauthenticated"


class Forbidden(BlogError):
    """Valid identity, insufficient rights."""

    status_code = 403
    code = "forbidden"


class VerificationRequired(BlogError):
    """Correct credentials but the account email is not verified yet."""

    status_code = 403
    code = "verification_required"


class NotFound(BlogError):
    status_code = 404
    code = "not_found"


class UpstreamUnavailable(BlogError):
    """Store, blob storage or notifier failure."""

    status_code = 500
    code = "upstream_unavailable"


class PartialFailure(BlogError):
    """
    A cascade aborted part way through.

    Steps that already ran are NOT rolled back; `completed_steps` lists
    them so the failure can be logged and repaired.
    """

    status_code = 500
    code = "partial_failure"

    def __init__(
        self,
        target: str,
        completed_steps: list[str],
        failed_step: str,
        message: str = "",
    ):
        super().__init__(message or f"Cascade for {target} failed at step '{failed_step}'")
        self.target = target
        self.completed_steps = list(completed_steps)
        self.failed_step = failed_step

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "completed_steps": self.completed_steps,
            "failed_step": self.failed_step,
        }
