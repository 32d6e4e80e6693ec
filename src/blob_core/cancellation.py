"""Cooperative cancellation for storage operations.

A `CancellationToken` is handed to storage calls by the caller. Backends check
it before they touch their state, so a token that fires early leaves no side
effects behind:

    token = CancellationToken()
    token.cancel()
    await storage.write("/a.txt", b"data", cancellation=token)  # raises, writes nothing

Task cancellation through ``asyncio`` keeps working as usual and surfaces as
``asyncio.CancelledError``.
"""

import asyncio

from blob_core.exceptions import OperationCancelledError


class CancellationToken:
    """Signal that lets a caller abort pending storage operations."""

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None
        self._never = False

    @classmethod
    def none(cls) -> "CancellationToken":
        """Return a token that can never be cancelled."""
        token = cls()
        token._never = True
        return token

    @property
    def cancelled(self) -> bool:
        """Check whether cancellation was requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Calling more than once is harmless."""
        if self._never:
            raise RuntimeError("CancellationToken.none() cannot be cancelled")
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if cancellation was requested."""
        if self._cancelled:
            raise OperationCancelledError("Operation was cancelled")

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()


def check_cancelled(token: CancellationToken | None) -> None:
    """Raise OperationCancelledError if ``token`` is set and has fired."""
    if token is not None:
        token.raise_if_cancelled()
