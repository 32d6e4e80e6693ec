"""Blob path normalization and comparison.

Every identifier handed to a storage backend goes through `normalize` first,
so that different spellings of the same location map to one key:

    >>> normalize("a//b/./c/../file.txt")
    '/a/b/file.txt'
    >>> normalize("\\\\a\\\\b")
    '/a/b'

Paths are case-sensitive. The root folder is ``/``.
"""

import re

from blob_core.exceptions import InvalidPathError

PATH_SEPARATOR = "/"
ROOT_FOLDER_PATH = "/"

_SEPARATORS_RE = re.compile(r"[/\\]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def split(path: str | None) -> list[str]:
    """Split a path into its resolved segments.

    Empty and ``.`` segments are dropped and ``..`` removes the previous
    segment.

    Raises:
        InvalidPathError: If ``..`` climbs above the root or a segment
            contains control characters
    """
    if not path:
        return []

    segments: list[str] = []
    for raw in _SEPARATORS_RE.split(path):
        part = raw.strip()
        if not part or part == ".":
            continue
        if _CONTROL_CHARS_RE.search(part):
            raise InvalidPathError(f"Invalid path {path!r}: control characters are not allowed")
        if part == "..":
            if not segments:
                raise InvalidPathError(f"Invalid path {path!r}: escapes the root folder")
            segments.pop()
            continue
        segments.append(part)
    return segments


def normalize(path: str | None) -> str:
    """Return the canonical, root-anchored form of a path."""
    return PATH_SEPARATOR + PATH_SEPARATOR.join(split(path))


def combine(*parts: str | None) -> str:
    """Join path parts and normalize the result."""
    return normalize(PATH_SEPARATOR.join(p for p in parts if p))


def is_root(path: str | None) -> bool:
    """Check whether a path resolves to the root folder."""
    return not split(path)


def is_folder_path(path: str | None) -> bool:
    """Check whether a raw path is spelled as a folder.

    That is the case when its last segment is empty (trailing separator),
    ``.`` or ``..``.
    """
    if not path or not path.strip():
        return True
    last = _SEPARATORS_RE.split(path)[-1].strip()
    return last in ("", ".", "..")


def get_name(path: str | None) -> str:
    """Get the last segment of a path, or an empty string for the root."""
    segments = split(path)
    return segments[-1] if segments else ""


def get_parent(path: str | None) -> str:
    """Get the normalized parent folder of a path. The root is its own parent."""
    segments = split(path)
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments[:-1])


def split_full_path(path: str | None) -> tuple[str, str]:
    """Decompose a path into ``(folder_path, name)``."""
    segments = split(path)
    if not segments:
        return ROOT_FOLDER_PATH, ""
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments[:-1]), segments[-1]


def compare_path(path1: str | None, path2: str | None) -> bool:
    """Check whether two paths denote the same location."""
    return split(path1) == split(path2)


def is_parent_of(parent: str | None, child: str | None) -> bool:
    """Check whether ``parent`` is a strict ancestor folder of ``child``.

    Comparison happens on segment boundaries, so ``/a`` is a parent of
    ``/a/b`` but not of ``/ab``.
    """
    parent_segments = split(parent)
    child_segments = split(child)
    if len(parent_segments) >= len(child_segments):
        return False
    return child_segments[: len(parent_segments)] == parent_segments


def is_in_folder(folder_path: str | None, path: str | None, recurse: bool = False) -> bool:
    """Check whether ``path`` is ``folder_path`` itself or, when recursing, below it."""
    if compare_path(folder_path, path):
        return True
    return recurse and is_parent_of(folder_path, path)
