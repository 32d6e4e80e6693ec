"""In-memory blob storage."""

from __future__ import annotations

import asyncio
import hashlib
import io
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, BinaryIO

from blob_core import paths
from blob_core.cancellation import CancellationToken, check_cancelled
from blob_core.exceptions import StorageClosedError
from blob_core.models import Blob, ListOptions
from blob_core.protocols.blob_storage import BlobContent, BlobId
from blob_core.streams import BlobWriteStream
from blob_core.transactions import EmptyTransaction
from blob_core.utils.validation import check_blob_full_path, check_blob_full_paths


@dataclass(frozen=True)
class Tag:
    """Stored content of one blob with its derived metadata."""

    data: bytes
    last_modified: datetime
    md5: str

    @classmethod
    def from_bytes(cls, data: bytes) -> Tag:
        """Build a tag, hashing the whole buffer."""
        return cls(
            data=data,
            last_modified=datetime.now(timezone.utc),
            md5=hashlib.md5(data).hexdigest(),
        )


def read_content(content: BlobContent) -> bytes:
    """Read bytes-like content, or a binary stream from its current position."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        raise TypeError("Blob content must be bytes-like or a binary stream, not str")
    if not hasattr(content, "read"):
        raise TypeError(f"Unsupported blob content type: {type(content).__name__}")
    return bytes(content.read())


class InMemoryBlobStorage:
    """Blob storage held in a dictionary.

    Suitable for development and testing. Data is lost when the instance goes
    away. All operations take an internal lock, so each one is atomic and
    concurrent appends to the same blob never lose an update.

    Appending re-hashes the whole blob every time, which gets slow for large
    blobs that are appended to often.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize an empty in-memory storage.

        Args:
            **kwargs: Ignored (for compatibility with other backends)
        """
        self._tags: dict[str, Tag] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StorageClosedError("InMemoryBlobStorage is closed")

    async def list(
        self,
        options: ListOptions | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[Blob]:
        """List blobs directly in a folder or, when recursing, anywhere below it."""
        if options is None:
            options = ListOptions()

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            snapshot = sorted(self._tags)

        matches: list[Blob] = []
        for full_path in snapshot:
            if options.max_results is not None and len(matches) >= options.max_results:
                break
            blob = Blob(full_path)
            if not paths.is_in_folder(options.folder_path, blob.folder_path, options.recurse):
                continue
            if options.matches(blob):
                matches.append(blob)

        return matches

    async def write(
        self,
        blob: BlobId,
        content: BlobContent,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Store content. Appending to a missing blob creates it."""
        full_path = check_blob_full_path(blob)
        if isinstance(content, str):
            raise TypeError("Blob content must be bytes-like or a binary stream, not str")

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            # Content is only consumed once the write is certain to happen
            self._store(full_path, read_content(content), append)

    def _store(self, full_path: str, data: bytes, append: bool) -> None:
        existing = self._tags.get(full_path) if append else None
        if existing is not None:
            data = existing.data + data
        self._tags[full_path] = Tag.from_bytes(data)

    async def open_write(
        self,
        blob: BlobId,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> BlobWriteStream:
        """Open a stream that writes to the blob when closed."""
        full_path = check_blob_full_path(blob)
        check_cancelled(cancellation)
        self._check_open()

        async def commit(data: bytes) -> None:
            if self._closed:
                return
            await self.write(full_path, data, append, cancellation=cancellation)

        return BlobWriteStream(commit, cancellation=cancellation)

    async def open_read(
        self,
        blob: BlobId,
        *,
        cancellation: CancellationToken | None = None,
    ) -> BinaryIO | None:
        """Open a private copy of the blob content. Returns None if not found."""
        full_path = check_blob_full_path(blob)

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            tag = self._tags.get(full_path)

        if tag is None:
            return None
        return io.BytesIO(tag.data)

    async def delete(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Delete blobs. Missing blobs are ignored."""
        full_paths = check_blob_full_paths(ids)

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            for full_path in full_paths:
                self._tags.pop(full_path, None)

    async def exists(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[bool]:
        """Check existence of each blob, in input order."""
        full_paths = check_blob_full_paths(ids)

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            return [full_path in self._tags for full_path in full_paths]

    async def get_metadata(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[Blob | None]:
        """Get size, MD5 and modification time of each blob, None where missing."""
        full_paths = check_blob_full_paths(ids)

        check_cancelled(cancellation)
        async with self._lock:
            self._check_open()
            check_cancelled(cancellation)
            tags = [self._tags.get(full_path) for full_path in full_paths]

        result: list[Blob | None] = []
        for full_path, tag in zip(full_paths, tags):
            if tag is None:
                result.append(None)
                continue
            result.append(
                Blob(
                    full_path,
                    size=len(tag.data),
                    md5=tag.md5,
                    last_modification_time=tag.last_modified,
                )
            )
        return result

    async def open_transaction(
        self, *, cancellation: CancellationToken | None = None
    ) -> EmptyTransaction:
        """Return the shared no-op transaction."""
        check_cancelled(cancellation)
        self._check_open()
        return EmptyTransaction.instance

    async def clear(self) -> None:
        """Remove all blobs. Useful for testing."""
        async with self._lock:
            self._tags.clear()

    async def close(self) -> None:
        """Discard all content. Closing twice is allowed."""
        async with self._lock:
            self._closed = True
            self._tags.clear()

    async def __aenter__(self) -> InMemoryBlobStorage:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
