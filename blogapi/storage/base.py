"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → MongoDB/PostgreSQL, local files → S3)
without changing application code.

Implementations must raise `UpstreamUnavailable` when the backing
service fails, so callers never see driver-specific exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel

from blogapi.core.models import ImageRef


# =============================================================================
# Storage Interfaces
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured documents (users, posts, comments, ...).

    Filters are equality matches on top-level fields. A list/tuple/set
    filter value means "field is one of these".

    Sort is a list of (field, direction) pairs, direction 1 or -1.
    """

    @abstractmethod
    async def save(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: Iterable[str] = (),
    ) -> None:
        """
        Save a document to a collection.

        Raises Conflict if another document in the collection already
        has the same value for any field named in `unique`.
        """
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: list[tuple[str, int]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional filters, sort and pagination."""
        pass

    @abstractmethod
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        """Count matching documents."""
        pass

    @abstractmethod
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        """
        Partial update of a single document. Returns the updated document.

        Must be atomic per document; read-modify-write callers (like toggles)
        need a backend with $addToSet/$pull-style updates to stay race free.
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete every matching document, return how many were removed."""
        pass


class BlobStorage(ABC):
    """
    Storage for uploaded images.

    Local Implementation: Filesystem
    AWS Implementation: S3
    """

    @abstractmethod
    async def upload(self, local_path: str | Path) -> ImageRef:
        """Upload a local file, return where it can be fetched from."""
        pass

    @abstractmethod
    async def remove(self, public_id: str) -> None:
        """Remove one image."""
        pass

    @abstractmethod
    async def remove_many(self, public_ids: list[str]) -> None:
        """Remove several images in one call."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Initialize once at app startup with appropriate implementations.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """

    model_config = {"arbitrary_types_allowed": True}

    metadata: MetadataStorage
    blobs: BlobStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""

    USERS = "users"
    POSTS = "posts"
    COMMENTS = "comments"
    CATEGORIES = "categories"
    VERIFICATION_TOKENS = "verification_tokens"
