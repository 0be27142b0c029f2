"""
Application state - every service wired to its collaborators.

Built once per app by `create_app()`; routes reach it through
`request.app.state.services`.
"""

from __future__ import annotations

from dataclasses import dataclass

from blogapi.auth.tokens import TokenIssuer
from blogapi.config import Settings
from blogapi.integrations.email import EmailService
from blogapi.services import (
    AccountService,
    CascadeCoordinator,
    CategoryService,
    CommentService,
    PostService,
    UserService,
    VerificationService,
)
from blogapi.storage import InMemoryMetadataStorage, LocalBlobStorage, StorageProvider


@dataclass
class AppState:
    """Application state - initialized at startup."""

    settings: Settings
    storage: StorageProvider
    tokens: TokenIssuer
    notifier: EmailService
    cascade: CascadeCoordinator
    verification: VerificationService
    accounts: AccountService
    users: UserService
    posts: PostService
    comments: CommentService
    categories: CategoryService

    @classmethod
    def build(
        cls,
        settings: Settings,
        storage: StorageProvider,
        notifier: EmailService,
    ) -> AppState:
        tokens = TokenIssuer(settings.token_config())
        cascade = CascadeCoordinator(
            storage,
            cascade_foreign_comments=settings.cascade_foreign_comments_on_user_delete,
        )
        verification = VerificationService(storage)

        return cls(
            settings=settings,
            storage=storage,
            tokens=tokens,
            notifier=notifier,
            cascade=cascade,
            verification=verification,
            accounts=AccountService(storage, tokens, verification, notifier),
            users=UserService(storage, cascade),
            posts=PostService(storage, cascade, posts_per_page=settings.posts_per_page),
            comments=CommentService(storage),
            categories=CategoryService(storage),
        )


def create_storage(settings: Settings) -> StorageProvider:
    """Pick the blob backend from settings; metadata is in-memory."""
    if settings.blob_backend == "s3":
        from blogapi.storage.s3 import S3BlobStorage
        blobs = S3BlobStorage(settings)
    else:
        blobs = LocalBlobStorage(settings.blob_local_path)

    return StorageProvider(metadata=InMemoryMetadataStorage(), blobs=blobs)
