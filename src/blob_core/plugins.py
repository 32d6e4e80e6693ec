"""Backend discovery via Python entry points."""

from importlib.metadata import entry_points
from typing import Any

from blob_core.backends.memory import InMemoryBlobStorage
from blob_core.config import Config
from blob_core.exceptions import BackendNotFoundError
from blob_core.observability import configure_logging, get_logger
from blob_core.protocols import BlobStorage

BACKEND_GROUP = "blob_core.backends"

# Available even when the package metadata is not installed
BUILTIN_BACKENDS: dict[str, Any] = {
    "memory": InMemoryBlobStorage,
}

logger = get_logger(__name__)


def discover_backends() -> dict[str, Any]:
    """Discover all registered blob storage backends.

    Returns:
        Dictionary mapping backend names to their classes
    """
    backends = dict(BUILTIN_BACKENDS)
    for ep in entry_points(group=BACKEND_GROUP):
        backends[ep.name] = ep.load()
    return backends


def get_backend(name: str) -> Any:
    """Get a backend class by name.

    Args:
        name: The backend name (e.g., "memory")

    Returns:
        The backend class

    Raises:
        BackendNotFoundError: If the backend is not found
    """
    backends = discover_backends()
    if name not in backends:
        available = ", ".join(sorted(backends.keys())) or "(none)"
        raise BackendNotFoundError(
            f"Backend '{name}' not found in group '{BACKEND_GROUP}'. Available: {available}"
        )
    return backends[name]


def create_blob_storage(backend: str, **kwargs: Any) -> BlobStorage:
    """Create a BlobStorage instance.

    Args:
        backend: The backend name (e.g., "memory")
        **kwargs: Backend-specific configuration

    Returns:
        A BlobStorage implementation
    """
    cls = get_backend(backend)
    storage = cls(**kwargs)
    logger.info("Created blob storage", context={"backend": backend})
    return storage


def create_from_config(config: Config) -> BlobStorage:
    """Configure logging and create the storage described by ``config``."""
    configure_logging(config.logging.level, config.logging.format)
    return create_blob_storage(config.storage.backend, **config.storage.options)
