"""BlobStorage protocol for blob storage backends."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, BinaryIO, Protocol, runtime_checkable

from blob_core.cancellation import CancellationToken
from blob_core.models import Blob, ListOptions
from blob_core.protocols.transaction import Transaction
from blob_core.streams import BlobWriteStream

BlobId = str | Blob
BlobContent = bytes | bytearray | memoryview | BinaryIO


@runtime_checkable
class BlobStorage(Protocol):
    """Protocol for blob storage backends (memory, filesystem, object stores).

    Every backend must give the same observable results for the same calls.
    Paths are normalized with `blob_core.paths` before use. A missing blob is
    reported as ``None``/``False``, never as an exception. Invalid paths raise
    `InvalidPathError` before anything is changed. A fired ``cancellation``
    token raises `OperationCancelledError` without side effects.
    """

    async def list(
        self,
        options: ListOptions | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[Blob]:
        """List blobs in a folder, optionally recursing. Returns name-only blobs."""
        ...

    async def write(
        self,
        blob: BlobId,
        content: BlobContent,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Store content, replacing or appending to an existing blob."""
        ...

    async def open_write(
        self,
        blob: BlobId,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> BlobWriteStream:
        """Open a stream whose content is written to the blob on close."""
        ...

    async def open_read(
        self,
        blob: BlobId,
        *,
        cancellation: CancellationToken | None = None,
    ) -> BinaryIO | None:
        """Open the blob content for reading. Returns None if not found."""
        ...

    async def delete(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Delete blobs. Missing blobs are ignored."""
        ...

    async def exists(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[bool]:
        """Check existence of each blob, in input order."""
        ...

    async def get_metadata(
        self,
        ids: Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[Blob | None]:
        """Get size, MD5 and modification time of each blob, in input order."""
        ...

    async def open_transaction(
        self, *, cancellation: CancellationToken | None = None
    ) -> Transaction:
        """Start a transaction scope."""
        ...

    async def close(self) -> None:
        """Release the backend."""
        ...

    async def __aenter__(self) -> Any:
        ...

    async def __aexit__(self, *args: Any) -> None:
        ...
