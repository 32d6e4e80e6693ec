"""High-level blob storage client over any BlobStorage backend."""

from collections.abc import Iterable
from typing import Any, BinaryIO

from blob_core import paths
from blob_core.cancellation import CancellationToken
from blob_core.models import Blob, ListOptions
from blob_core.observability import OperationContext, emit_metric, get_logger
from blob_core.protocols import BlobId, BlobStorage, Transaction
from blob_core.streams import BlobWriteStream

logger = get_logger(__name__)


class StorageClient:
    """Convenience operations on top of a BlobStorage backend.

    Each call runs in its own OperationContext, so log lines carry the
    operation id, storage name and path, and the call is reported as a
    ``blob.<operation>`` timer or a ``blob.<operation>.errors`` counter.
    Reads and writes also report ``blob.bytes_read`` and
    ``blob.bytes_written``.

    Example:
        client = StorageClient(InMemoryBlobStorage(), name="uploads")
        await client.write_text("/docs/readme.txt", "hello")
        text = await client.read_text("/docs/readme.txt")
    """

    def __init__(self, storage: BlobStorage, name: str | None = None) -> None:
        """Initialize client.

        Args:
            storage: Backend all calls are delegated to
            name: Storage name attached to log lines and metrics
        """
        self.storage = storage
        self.name = name

    def _operation(self, operation: str, path: str | None = None) -> OperationContext:
        return OperationContext(operation, storage_name=self.name, path=path)

    async def read_bytes(
        self, blob: BlobId, *, cancellation: CancellationToken | None = None
    ) -> bytes | None:
        """Read the whole blob. Returns None if not found."""
        with self._operation("read", str(blob)):
            stream = await self.storage.open_read(blob, cancellation=cancellation)
            if stream is None:
                return None
            with stream:
                data = stream.read()
            emit_metric("blob.bytes_read", len(data))
            return data

    async def read_text(
        self,
        blob: BlobId,
        encoding: str = "utf-8",
        *,
        cancellation: CancellationToken | None = None,
    ) -> str | None:
        """Read the whole blob as text. Returns None if not found."""
        data = await self.read_bytes(blob, cancellation=cancellation)
        return data.decode(encoding) if data is not None else None

    async def write_bytes(
        self,
        blob: BlobId,
        data: bytes,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Write bytes, replacing the blob unless ``append`` is set."""
        with self._operation("append" if append else "write", str(blob)):
            await self.storage.write(blob, data, append, cancellation=cancellation)
            emit_metric("blob.bytes_written", len(data))

    async def write_text(
        self,
        blob: BlobId,
        text: str,
        encoding: str = "utf-8",
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Write text, replacing the blob unless ``append`` is set."""
        await self.write_bytes(blob, text.encode(encoding), append, cancellation=cancellation)

    async def append_bytes(
        self, blob: BlobId, data: bytes, *, cancellation: CancellationToken | None = None
    ) -> None:
        """Append bytes, creating the blob if missing."""
        await self.write_bytes(blob, data, append=True, cancellation=cancellation)

    async def append_text(
        self,
        blob: BlobId,
        text: str,
        encoding: str = "utf-8",
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Append text, creating the blob if missing."""
        await self.write_text(blob, text, encoding, append=True, cancellation=cancellation)

    async def exists(
        self, blob: BlobId, *, cancellation: CancellationToken | None = None
    ) -> bool:
        """Check whether a single blob exists."""
        with self._operation("exists", str(blob)):
            result = await self.storage.exists([blob], cancellation=cancellation)
            return result[0]

    async def get_blob(
        self, blob: BlobId, *, cancellation: CancellationToken | None = None
    ) -> Blob | None:
        """Get metadata of a single blob. Returns None if not found."""
        with self._operation("get_metadata", str(blob)):
            result = await self.storage.get_metadata([blob], cancellation=cancellation)
            return result[0]

    async def delete(
        self,
        ids: BlobId | Iterable[BlobId],
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Delete one blob or a batch of blobs. Missing blobs are ignored."""
        if isinstance(ids, (str, Blob)):
            ids = [ids]
        ids = list(ids)
        with self._operation("delete", ", ".join(str(i) for i in ids)):
            await self.storage.delete(ids, cancellation=cancellation)

    async def list_files(
        self,
        folder_path: str = paths.ROOT_FOLDER_PATH,
        recurse: bool = False,
        cancellation: CancellationToken | None = None,
        **options: Any,
    ) -> list[Blob]:
        """List blobs in a folder.

        Args:
            folder_path: Folder to list
            recurse: Include blobs in subfolders
            cancellation: Optional cancellation token
            **options: Other ListOptions fields (max_results, file_prefix,
                is_match, browse_filter)
        """
        list_options = ListOptions(folder_path=folder_path, recurse=recurse, **options)
        with self._operation("list", list_options.folder_path):
            return await self.storage.list(list_options, cancellation=cancellation)

    async def copy(
        self,
        source: BlobId,
        target: BlobId,
        target_storage: BlobStorage | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> bool:
        """Copy a blob, optionally into another storage.

        Returns:
            False if the source blob does not exist
        """
        destination = target_storage if target_storage is not None else self.storage
        with self._operation("copy", str(source)):
            stream = await self.storage.open_read(source, cancellation=cancellation)
            if stream is None:
                return False
            with stream:
                await destination.write(target, stream, cancellation=cancellation)
            return True

    async def rename(
        self,
        source: BlobId,
        target: BlobId,
        *,
        cancellation: CancellationToken | None = None,
    ) -> bool:
        """Move a blob within the storage.

        Returns:
            False if the source blob does not exist
        """
        if paths.compare_path(str(source), str(target)):
            return await self.exists(source, cancellation=cancellation)
        if not await self.copy(source, target, cancellation=cancellation):
            return False
        await self.delete(source, cancellation=cancellation)
        return True

    async def delete_folder(
        self,
        folder_path: str,
        *,
        cancellation: CancellationToken | None = None,
    ) -> int:
        """Delete every blob in a folder and its subfolders.

        Returns:
            Number of blobs deleted
        """
        blobs = await self.list_files(folder_path, recurse=True, cancellation=cancellation)
        if blobs:
            await self.delete(blobs, cancellation=cancellation)
        logger.info("Folder deleted", context={"folder_path": folder_path, "count": len(blobs)})
        return len(blobs)

    async def open_read(
        self, blob: BlobId, *, cancellation: CancellationToken | None = None
    ) -> BinaryIO | None:
        """Open the blob for reading. Returns None if not found."""
        return await self.storage.open_read(blob, cancellation=cancellation)

    async def open_write(
        self,
        blob: BlobId,
        append: bool = False,
        *,
        cancellation: CancellationToken | None = None,
    ) -> BlobWriteStream:
        """Open a stream that writes to the blob when closed."""
        return await self.storage.open_write(blob, append, cancellation=cancellation)

    async def open_transaction(
        self, *, cancellation: CancellationToken | None = None
    ) -> Transaction:
        """Start a transaction on the backend."""
        return await self.storage.open_transaction(cancellation=cancellation)
