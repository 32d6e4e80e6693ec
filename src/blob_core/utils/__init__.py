"""Utility modules."""

from blob_core.utils.validation import check_blob_full_path, check_blob_full_paths

__all__ = [
    "check_blob_full_path",
    "check_blob_full_paths",
]
