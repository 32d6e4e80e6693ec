"""Blob storage backend implementations."""

from blob_core.backends.memory import InMemoryBlobStorage, Tag

__all__ = [
    "InMemoryBlobStorage",
    "Tag",
]
