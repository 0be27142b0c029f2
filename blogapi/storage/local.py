"""
Local storage implementations for development.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

import copy
import shutil
from pathlib import Path
from typing import Any, Iterable

from blogapi.core.errors import Conflict, UpstreamUnavailable
from blogapi.core.models import ImageRef
from blogapi.core.utils import generate_id
from blogapi.storage.base import (
    BlobStorage,
    MetadataStorage,
)


def _matches(doc: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    for key, value in filters.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            if doc.get(key) not in value:
                return False
        elif doc.get(key) != value:
            return False
    return True


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage for development and tests."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    async def save(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: Iterable[str] = (),
    ) -> None:
        docs = self._data.setdefault(collection, {})

        for field in unique:
            value = data.get(field)
            for other_id, other in docs.items():
                if other_id != id and other.get(field) == value:
                    raise Conflict(f"{collection}.{field} already exists")

        docs[id] = {**copy.deepcopy(data), "_id": id}

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: list[tuple[str, int]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        results = [
            doc for doc in self._data.get(collection, {}).values()
            if _matches(doc, filters)
        ]

        # Stable sorts applied last-key-first give a multi-key ordering
        for field, direction in reversed(sort or []):
            results.sort(
                key=lambda doc: (doc.get(field) is None, doc.get(field)),
                reverse=direction < 0,
            )

        end = offset + limit if limit is not None else None
        return copy.deepcopy(results[offset:end])

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return sum(
            1 for doc in self._data.get(collection, {}).values()
            if _matches(doc, filters)
        )

    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(updates))
        return copy.deepcopy(doc)

    async def delete(self, collection: str, id: str) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        docs = self._data.get(collection, {})
        doomed = [doc_id for doc_id, doc in docs.items() if _matches(doc, filters)]
        for doc_id in doomed:
            del docs[doc_id]
        return len(doomed)


# =============================================================================
# Local Filesystem Blob Storage
# =============================================================================


class LocalBlobStorage(BlobStorage):
    """Store images on the local filesystem."""

    def __init__(self, base_path: str = "./data/images"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, public_id: str) -> Path:
        return self.base_path / public_id

    async def upload(self, local_path: str | Path) -> ImageRef:
        source = Path(local_path)
        public_id = f"{generate_id('img')}{source.suffix.lower()}"
        target = self._path(public_id)
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise UpstreamUnavailable(f"Image upload failed: {e}") from e
        return ImageRef(url=f"file://{target.absolute()}", public_id=public_id)

    async def remove(self, public_id: str) -> None:
        try:
            self._path(public_id).unlink(missing_ok=True)
        except OSError as e:
            raise UpstreamUnavailable(f"Image removal failed: {e}") from e

    async def remove_many(self, public_ids: list[str]) -> None:
        for public_id in public_ids:
            await self.remove(public_id)

    def exists(self, public_id: str) -> bool:
        return self._path(public_id).exists()

