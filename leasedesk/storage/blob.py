"""
Blob storage for generated lease documents and captured signature images.

Keys are forward-slash relative paths such as "leases/lease_1_20240101120000.pdf";
the local implementation roots them under UPLOADS_DIR.
"""
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from leasedesk.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised for unreadable keys or keys escaping the storage root."""


def normalize_key(key: str) -> str:
    cleaned = posixpath.normpath(key.replace("\\", "/").lstrip("/"))
    if cleaned in ("", ".") or cleaned.startswith(".."):
        raise StorageError(f"Invalid storage key: {key!r}")
    return cleaned


class BlobStorage(ABC):

    @abstractmethod
    def write_bytes(self, key: str, data: bytes) -> str:
        """Store *data* under *key*; returns the normalised key."""
        ...

    def write_text(self, key: str, data: str, encoding: str = "utf-8") -> str:
        return self.write_bytes(key, data.encode(encoding))

    @abstractmethod
    def read_bytes(self, key: str) -> bytes:
        """Raises StorageError when the key does not exist."""
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...


class LocalBlobStorage(BlobStorage):
    """Filesystem storage; directories are created on first write, not at construction."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LocalBlobStorage":
        return cls((settings or get_settings()).UPLOADS_DIR)

    def _path(self, key: str) -> Path:
        return self.root.joinpath(*normalize_key(key).split("/"))

    def write_bytes(self, key: str, data: bytes) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug(f"[STORAGE] Wrote {len(data)} bytes to {path}")
        return normalize_key(key)

    def read_bytes(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read '{key}': {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except StorageError:
            return False


class InMemoryBlobStorage(BlobStorage):

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}

    def write_bytes(self, key: str, data: bytes) -> str:
        cleaned = normalize_key(key)
        self.blobs[cleaned] = bytes(data)
        return cleaned

    def read_bytes(self, key: str) -> bytes:
        cleaned = normalize_key(key)
        if cleaned not in self.blobs:
            raise StorageError(f"Cannot read '{key}': not found")
        return self.blobs[cleaned]

    def exists(self, key: str) -> bool:
        try:
            return normalize_key(key) in self.blobs
        except StorageError:
            return False
