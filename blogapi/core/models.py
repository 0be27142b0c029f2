"""
Core data models for the blog API.

Users own posts, posts own comments, comments also point back to the user
who wrote them. Categories are standalone and referenced by title.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from blogapi.core.utils import generate_id, generate_secret, utc_now


DEFAULT_PROFILE_PHOTO_URL = (
    "https://cdn.pixabay.com/photo/2015/10/05/22/37/blank-profile-picture-973460__480.png"
)


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Platform-wide role carried in every token."""

    USER = "user"
    ADMIN = "admin"


# =============================================================================
# Value objects
# =============================================================================


class ImageRef(BaseModel):
    """Where an uploaded image lives in blob storage."""

    url: str = ""
    public_id: str | None = None


# =============================================================================
# Entities
# =============================================================================


class User(BaseModel):
    """A registered account (identity + credentials + profile)."""

    id: str = Field(default_factory=lambda: generate_id("user"))
    username: str
    email: str
    password_hash: str
    role: Role = Role.USER
    is_account_verified: bool = False
    bio: str | None = None
    profile_photo: ImageRef = Field(
        default_factory=lambda: ImageRef(url=DEFAULT_PROFILE_PHOTO_URL)
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Post(BaseModel):
    """A blog post. `user_id` is fixed at creation."""

    id: str = Field(default_factory=lambda: generate_id("post"))
    title: str
    description: str
    user_id: str
    category: str
    image: ImageRef = Field(default_factory=ImageRef)
    likes: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def owner_id(self) -> str:
        return self.user_id


class Comment(BaseModel):
    """A comment on a post. `username` is copied from the author at creation."""

    id: str = Field(default_factory=lambda: generate_id("cmt"))
    post_id: str
    user_id: str
    text: str
    username: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def owner_id(self) -> str:
        return self.user_id


class Category(BaseModel):
    """A category title. Posts reference it by value, not by id."""

    id: str = Field(default_factory=lambda: generate_id("cat"))
    title: str
    user_id: str

    created_at: datetime = Field(default_factory=utc_now)


class VerificationToken(BaseModel):
    """Single-use secret sent by email (account verification, password reset)."""

    id: str = Field(default_factory=lambda: generate_id("vtok"))
    user_id: str
    token: str = Field(default_factory=generate_secret)

    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Public views
# =============================================================================


class UserResponse(BaseModel):
    """User data returned to clients (no password hash)."""

    id: str
    username: str
    email: str
    is_admin: bool
    is_account_verified: bool
    bio: str | None = None
    profile_photo: ImageRef
    created_at: datetime
    posts: list[Post] | None = None

    @classmethod
    def from_user(cls, user: User, posts: list[Post] | None = None) -> UserResponse:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            is_admin=user.is_admin,
            is_account_verified=user.is_account_verified,
            bio=user.bio,
            profile_photo=user.profile_photo,
            created_at=user.created_at,
            posts=posts,
        )


class PostDetail(Post):
    """A post with its author and comments embedded."""

    user: UserResponse | None = None
    comments: list[Comment] = Field(default_factory=list)


# =============================================================================
# Likes
# =============================================================================


def toggle_like(likes: list[str], user_id: str) -> list[str]:
    """
    Flip `user_id`'s membership in `likes`.

    Applying it twice with the same user returns the original list.
    """
    if user_id in likes:
        return [liker for liker in likes if liker != user_id]
    return [*likes, user_id]
