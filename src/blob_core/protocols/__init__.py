"""Protocol interfaces for pluggable backends."""

from blob_core.protocols.blob_storage import BlobContent, BlobId, BlobStorage
from blob_core.protocols.transaction import Transaction

__all__ = [
    "BlobContent",
    "BlobId",
    "BlobStorage",
    "Transaction",
]
