"""
Core module - data models, error taxonomy and shared utilities.
"""

from blogapi.core.errors import (
    BlogError,
    Conflict,
    Forbidden,
    InvalidCredentials,
    NotFound,
    PartialFailure,
    Unauthenticated,
    UpstreamUnavailable,
    ValidationError,
    VerificationRequired,
)
from blogapi.core.models import (
    Category,
    Comment,
    ImageRef,
    Post,
    PostDetail,
    Role,
    User,
    UserResponse,
    VerificationToken,
    toggle_like,
)
from blogapi.core.utils import generate_id, generate_secret, utc_now

__all__ = [
    # Errors
    "BlogError",
    "Conflict",
    "Forbidden",
    "InvalidCredentials",
    "NotFound",
    "PartialFailure",
    "Unauthenticated",
    "UpstreamUnavailable",
    "ValidationError",
    "VerificationRequired",
    # Models
    "Category",
    "Comment",
    "ImageRef",
    "Post",
    "PostDetail",
    "Role",
    "User",
    "UserResponse",
    "VerificationToken",
    "toggle_like",
    # Utils
    "generate_id",
    "generate_secret",
    "utc_now",
]
