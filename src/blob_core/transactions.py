"""Transaction implementations shared by backends."""

from typing import Any


class BaseTransaction:
    """Context-manager plumbing for Transaction implementations.

    Subclasses override `commit`, `rollback` and `close`.
    """

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "BaseTransaction":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Commit on clean exit, roll back on exception, always close."""
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.close()


class EmptyTransaction(BaseTransaction):
    """Transaction for backends without native transactions. Every call is a no-op."""

    instance: "EmptyTransaction"

    def __repr__(self) -> str:
        return "EmptyTransaction()"


EmptyTransaction.instance = EmptyTransaction()
