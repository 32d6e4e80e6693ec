"""Transaction protocol for storage backends."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Transaction(Protocol):
    """Scoped unit of work opened by a storage backend.

    Used as an async context manager: commits on clean exit, rolls back on
    exception, and closes in both cases.
    """

    async def commit(self) -> None:
        """Make the changes of this transaction permanent."""
        ...

    async def rollback(self) -> None:
        """Undo the changes of this transaction."""
        ...

    async def close(self) -> None:
        """Release the transaction."""
        ...

    async def __aenter__(self) -> "Transaction":
        ...

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        ...
