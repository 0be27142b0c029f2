"""
Test doubles and seeding helpers shared across test modules.
"""

import asyncio
from dataclasses import dataclass

from fastapi.testclient import TestClient

from blogapi.auth.passwords import hash_password
from blogapi.core.models import Comment, ImageRef, Post, Role, User
from blogapi.storage import Collections, StorageProvider

PASSWORD = "Passw0rd!"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# =============================================================================
# Test doubles
# =============================================================================


class RecordingNotifier:
    """Stands in for EmailService; keeps every message it was asked to send."""

    def __init__(self):
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        self.sent.append({"kind": "raw", "to": to, "subject": subject})
        return True

    async def send_verification(self, email: str, username: str, user_id: str, token: str) -> bool:
        self.sent.append({"kind": "verify", "to": email, "user_id": user_id, "token": token})
        return True

    async def send_password_reset(self, email: str, user_id: str, token: str) -> bool:
        self.sent.append({"kind": "reset", "to": email, "user_id": user_id, "token": token})
        return True

    def of_kind(self, kind: str) -> list[dict]:
        return [m for m in self.sent if m["kind"] == kind]

    def last(self, kind: str) -> dict:
        return self.of_kind(kind)[-1]


class FailingNotifier(RecordingNotifier):
    """Every send blows up (mail provider down)."""

    async def send_verification(self, *args, **kwargs) -> bool:
        raise ConnectionError("smtp down")

    async def send_password_reset(self, *args, **kwargs) -> bool:
        raise ConnectionError("smtp down")


# =============================================================================
# Seeding through storage
# =============================================================================


async def seed_user(
    storage: StorageProvider,
    username: str,
    role: Role = Role.USER,
    verified: bool = True,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(PASSWORD),
        role=role,
        is_account_verified=verified,
    )
    await storage.metadata.save(Collections.USERS, user.id, user.model_dump(), unique=("email",))
    return user


async def seed_post(storage: StorageProvider, owner: User, image_path, title: str = "A post") -> Post:
    image: ImageRef = await storage.blobs.upload(image_path)
    post = Post(
        title=title,
        description="Long enough description",
        category="general",
        user_id=owner.id,
        image=image,
    )
    await storage.metadata.save(Collections.POSTS, post.id, post.model_dump())
    return post


async def seed_comment(storage: StorageProvider, post: Post, author: User, text: str = "Nice") -> Comment:
    comment = Comment(post_id=post.id, user_id=author.id, text=text, username=author.username)
    await storage.metadata.save(Collections.COMMENTS, comment.id, comment.model_dump())
    return comment


# =============================================================================
# Seeding through the API
# =============================================================================


@dataclass
class ApiUser:
    id: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def signup(
    client: TestClient,
    notifier: RecordingNotifier,
    storage: StorageProvider,
    username: str,
    admin: bool = False,
) -> ApiUser:
    """Register, verify and log in through the HTTP API."""
    email = f"{username}@example.com"
    resp = client.post("/api/auth/register", json={
        "username": username, "email": email, "password": PASSWORD,
    })
    assert resp.status_code == 201, resp.text

    link = notifier.last("verify")
    resp = client.get(f"/api/auth/{link['user_id']}/verify/{link['token']}")
    assert resp.status_code == 200, resp.text

    if admin:
        asyncio.run(storage.metadata.update(Collections.USERS, link["user_id"], {"role": Role.ADMIN}))

    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return ApiUser(id=body["id"], token=body["token"])
