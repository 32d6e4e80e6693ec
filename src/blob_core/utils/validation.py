"""Input validation utilities."""

from collections.abc import Iterable

from blob_core import paths
from blob_core.exceptions import InvalidPathError
from blob_core.models import Blob


def check_blob_full_path(path: "str | Blob | None") -> str:
    """Validate that a path resolves to a single blob.

    Args:
        path: Raw path or Blob to validate

    Returns:
        The normalized full path

    Raises:
        InvalidPathError: If the path is empty, is the root, is spelled as a
            folder, or contains disallowed segments
    """
    if path is None:
        raise InvalidPathError("Blob path cannot be None")

    if isinstance(path, Blob):
        if path.is_folder:
            raise InvalidPathError(f"Blob {path.full_path!r} is a folder, not a file")
        path = path.full_path

    if not isinstance(path, str):
        raise InvalidPathError(f"Blob path must be a string, got {type(path).__name__}")

    if not path.strip():
        raise InvalidPathError("Blob path cannot be empty")

    if paths.is_folder_path(path):
        raise InvalidPathError(f"Invalid blob path {path!r}: resolves to a folder")

    full_path = paths.normalize(path)
    if full_path == paths.ROOT_FOLDER_PATH:
        raise InvalidPathError(f"Invalid blob path {path!r}: resolves to the root folder")

    return full_path


def check_blob_full_paths(ids: "Iterable[str | Blob]") -> list[str]:
    """Validate a batch of paths before anything is changed.

    Returns:
        Normalized full paths in input order
    """
    if ids is None:
        raise InvalidPathError("Blob id collection cannot be None")

    if isinstance(ids, (str, Blob)):
        raise InvalidPathError("Expected a collection of blob ids, got a single id")

    return [check_blob_full_path(blob_id) for blob_id in ids]
