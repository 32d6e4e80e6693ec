"""Blob Core exceptions."""


class BlobCoreError(Exception):
    """Base exception for blob-core."""

    pass


class ConfigError(BlobCoreError):
    """Configuration error."""

    pass


class BackendNotFoundError(ConfigError):
    """No backend is registered under the requested name."""

    pass


class StorageError(BlobCoreError):
    """Blob storage operation error."""

    pass


class InvalidPathError(StorageError, ValueError):
    """Path is malformed or does not resolve to a single blob."""

    pass


class OperationCancelledError(StorageError):
    """Operation was cancelled before it touched the store."""

    pass


class StorageClosedError(StorageError):
    """Storage has been closed and can no longer be used."""

    pass
