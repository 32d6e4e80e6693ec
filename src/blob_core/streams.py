"""Write stream that commits its buffer to storage on close."""

import asyncio
import io
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any

from blob_core.cancellation import CancellationToken, check_cancelled

CommitCallback = Callable[[bytes], Awaitable[None]]


class WriteState(str, Enum):
    """Lifecycle of a BlobWriteStream."""

    OPEN = "open"
    CLOSING = "closing"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class BlobWriteStream:
    """Buffered writable handle returned by ``open_write``.

    Nothing reaches the store while the stream is open. ``close()`` hands the
    whole buffer to ``commit`` exactly once, however many times it is called.

    Example:
        async with await storage.open_write("/logs/today.log", append=True) as stream:
            stream.write(b"line 1\\n")
            stream.write(b"line 2\\n")
    """

    def __init__(
        self,
        commit: CommitCallback,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Initialize write stream.

        Args:
            commit: Coroutine function receiving the buffered bytes on close
            cancellation: Token that discards the buffer if it fires before close
        """
        self._commit = commit
        self._cancellation = cancellation
        self._buffer = io.BytesIO()
        self._state = WriteState.OPEN
        self._commit_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> WriteState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state != WriteState.OPEN

    def writable(self) -> bool:
        return not self.closed

    def tell(self) -> int:
        """Number of bytes buffered so far."""
        return self._buffer.tell()

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Buffer bytes for the final commit.

        Returns:
            Number of bytes written

        Raises:
            TypeError: If ``data`` is not bytes-like
            ValueError: If the stream is already closed
        """
        if isinstance(data, str):
            raise TypeError("BlobWriteStream accepts bytes-like objects, not str")
        if self.closed:
            raise ValueError("I/O operation on closed BlobWriteStream")
        return self._buffer.write(data)

    def writelines(self, lines: Iterable[bytes]) -> None:
        """Buffer each chunk in order."""
        for line in lines:
            self.write(line)

    def discard(self) -> None:
        """Drop buffered bytes without committing them."""
        if self._state == WriteState.OPEN:
            self._state = WriteState.DISCARDED
            self._buffer = io.BytesIO()

    async def close(self) -> None:
        """Commit the buffer. Later calls wait for the same commit.

        Raises:
            OperationCancelledError: If cancellation fired before close; the
                buffer is discarded
        """
        if self._commit_task is None:
            if self._state == WriteState.DISCARDED:
                return
            self._state = WriteState.CLOSING
            data = self._buffer.getvalue()
            self._buffer = io.BytesIO()
            self._commit_task = asyncio.ensure_future(self._finalize(data))
        # The commit runs to completion even if the closing caller is cancelled
        await asyncio.shield(self._commit_task)

    async def _finalize(self, data: bytes) -> None:
        try:
            check_cancelled(self._cancellation)
            await self._commit(data)
        except BaseException:
            self._state = WriteState.DISCARDED
            raise
        self._state = WriteState.COMMITTED

    async def __aenter__(self) -> "BlobWriteStream":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        """Commit on clean exit, discard when the block raised."""
        if exc_type is None:
            await self.close()
        else:
            self.discard()
