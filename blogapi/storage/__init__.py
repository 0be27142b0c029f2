"""
Storage abstractions.

- MetadataStorage → in-memory (dev/tests); swap for a document database
- BlobStorage → local filesystem or S3
"""

from blogapi.storage.base import (
    BlobStorage,
    Collections,
    MetadataStorage,
    StorageProvider,
)
from blogapi.storage.local import (
    InMemoryMetadataStorage,
    LocalBlobStorage,
)

__all__ = [
    "BlobStorage",
    "Collections",
    "MetadataStorage",
    "StorageProvider",
    "InMemoryMetadataStorage",
    "LocalBlobStorage",
]
