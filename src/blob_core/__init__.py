"""Blob Core - A uniform asynchronous blob storage abstraction."""

from blob_core.backends import InMemoryBlobStorage
from blob_core.cancellation import CancellationToken
from blob_core.client import StorageClient
from blob_core.config import Config
from blob_core.exceptions import (
    BackendNotFoundError,
    BlobCoreError,
    ConfigError,
    InvalidPathError,
    OperationCancelledError,
    StorageClosedError,
    StorageError,
)
from blob_core.models import Blob, BlobItemKind, ListOptions
from blob_core.observability import (
    LogLevel,
    OperationContext,
    StructuredLogger,
    configure_logging,
    emit_counter,
    emit_metric,
    emit_timer,
    get_logger,
    register_metric_callback,
    unregister_metric_callback,
)
from blob_core.plugins import create_blob_storage, create_from_config
from blob_core.protocols import BlobStorage, Transaction
from blob_core.streams import BlobWriteStream, WriteState
from blob_core.transactions import EmptyTransaction

__version__ = "0.1.0"
__all__ = [
    # Core
    "Blob",
    "BlobItemKind",
    "BlobStorage",
    "BlobWriteStream",
    "CancellationToken",
    "EmptyTransaction",
    "InMemoryBlobStorage",
    "ListOptions",
    "StorageClient",
    "Transaction",
    "WriteState",
    "create_blob_storage",
    "create_from_config",
    # Configuration
    "Config",
    # Errors
    "BackendNotFoundError",
    "BlobCoreError",
    "ConfigError",
    "InvalidPathError",
    "OperationCancelledError",
    "StorageClosedError",
    "StorageError",
    # Observability
    "LogLevel",
    "OperationContext",
    "StructuredLogger",
    "configure_logging",
    "emit_counter",
    "emit_metric",
    "emit_timer",
    "get_logger",
    "register_metric_callback",
    "unregister_metric_callback",
]
