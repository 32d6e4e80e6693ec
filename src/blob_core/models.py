"""Blob identity and listing options."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from blob_core import paths


class BlobItemKind(str, Enum):
    """Whether a blob entry is a stored object or a folder."""

    FILE = "file"
    FOLDER = "folder"


class Blob:
    """Identifier of a stored blob with optional metadata.

    Two blobs are equal when their normalized full paths are equal; metadata
    never takes part in comparison or hashing, so a ``Blob`` can be used as a
    dictionary key or set member.

    Example:
        blob = Blob("/docs/2024/report.pdf")
        blob.folder_path  # "/docs/2024"
        blob.name  # "report.pdf"
    """

    __slots__ = (
        "folder_path",
        "name",
        "kind",
        "size",
        "md5",
        "last_modification_time",
        "metadata",
    )

    def __init__(
        self,
        folder_path: str,
        name: str | None = None,
        kind: BlobItemKind = BlobItemKind.FILE,
        size: int | None = None,
        md5: str | None = None,
        last_modification_time: datetime | None = None,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Initialize a blob.

        Args:
            folder_path: Folder containing the blob, or the whole full path
                when ``name`` is omitted
            name: Blob name within the folder
            kind: File or folder
            size: Content length in bytes
            md5: Lowercase hex MD5 of the content
            last_modification_time: Time of the last successful write
            metadata: Custom string properties
        """
        if name is None:
            folder_path, name = paths.split_full_path(folder_path)
        else:
            folder_path, name = paths.split_full_path(paths.combine(folder_path, name))

        self.folder_path = folder_path
        self.name = name
        self.kind = kind
        self.size = size
        self.md5 = md5
        self.last_modification_time = last_modification_time
        self.metadata = dict(metadata) if metadata else {}

    @classmethod
    def from_path(cls, full_path: str, kind: BlobItemKind = BlobItemKind.FILE) -> "Blob":
        """Create a blob from a full path."""
        return cls(full_path, kind=kind)

    @property
    def full_path(self) -> str:
        """Normalized path of the blob including its name."""
        return paths.combine(self.folder_path, self.name)

    @property
    def is_file(self) -> bool:
        return self.kind == BlobItemKind.FILE

    @property
    def is_folder(self) -> bool:
        return self.kind == BlobItemKind.FOLDER

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "full_path": self.full_path,
            "kind": self.kind.value,
            "size": self.size,
            "md5": self.md5,
            "last_modification_time": (
                self.last_modification_time.isoformat() if self.last_modification_time else None
            ),
            "metadata": dict(self.metadata),
        }

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Blob):
            return self.full_path == other.full_path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.full_path)

    def __str__(self) -> str:
        return self.full_path

    def __repr__(self) -> str:
        return f"Blob({self.full_path!r}, kind={self.kind.value!r}, size={self.size!r})"


BlobPredicate = Callable[[Blob], bool]


@dataclass
class ListOptions:
    """Options for a single list call."""

    folder_path: str = paths.ROOT_FOLDER_PATH
    recurse: bool = False
    max_results: int | None = None
    file_prefix: str | None = None
    is_match: BlobPredicate | None = field(default=None, repr=False)
    browse_filter: BlobPredicate | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.max_results is not None and self.max_results < 0:
            raise ValueError(f"max_results must be >= 0, got {self.max_results}")
        self.folder_path = paths.normalize(self.folder_path)

    def matches(self, blob: Blob) -> bool:
        """Apply the name prefix, ``is_match`` and ``browse_filter`` in that order."""
        if self.file_prefix and not blob.name.startswith(self.file_prefix):
            return False
        if self.is_match is not None and not self.is_match(blob):
            return False
        return self.browse_filter is None or self.browse_filter(blob)
