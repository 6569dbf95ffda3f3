from leasedesk.storage.blob import (
    BlobStorage,
    InMemoryBlobStorage,
    LocalBlobStorage,
    StorageError,
    normalize_key,
)

__all__ = [
    "BlobStorage",
    "InMemoryBlobStorage",
    "LocalBlobStorage",
    "StorageError",
    "normalize_key",
]
