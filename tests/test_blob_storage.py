import pytest

from leasedesk.core.config import Settings
from leasedesk.storage.blob import InMemoryBlobStorage, LocalBlobStorage, StorageError, normalize_key


@pytest.mark.parametrize("key", ["", ".", "../etc/passwd", "leases/../../secret"])
def test_normalize_rejects_escaping_keys(key):
    with pytest.raises(StorageError):
        normalize_key(key)


def test_normalize_cleans_separators():
    assert normalize_key("/leases//lease_1.pdf") == "leases/lease_1.pdf"
    assert normalize_key("signatures\\sig.png") == "signatures/sig.png"


def test_local_storage_creates_directories_lazily(tmp_path):
    root = tmp_path / "uploads"
    storage = LocalBlobStorage(root)
    assert not root.exists()

    key = storage.write_bytes("leases/lease_1_20240110093000.pdf", b"%PDF-1.4")

    assert key == "leases/lease_1_20240110093000.pdf"
    assert (root / "leases" / "lease_1_20240110093000.pdf").read_bytes() == b"%PDF-1.4"
    assert storage.exists(key)
    assert storage.read_bytes(key) == b"%PDF-1.4"


def test_local_storage_text_and_missing_keys(tmp_path):
    storage = LocalBlobStorage(tmp_path)
    storage.write_text("leases/lease_1.html", "<p>é</p>")

    assert storage.read_bytes("leases/lease_1.html") == "<p>é</p>".encode("utf-8")
    assert not storage.exists("leases/missing.pdf")
    assert not storage.exists("../outside")
    with pytest.raises(StorageError):
        storage.read_bytes("leases/missing.pdf")


def test_local_storage_from_settings(tmp_path):
    storage = LocalBlobStorage.from_settings(Settings(_env_file=None, UPLOADS_DIR=str(tmp_path / "files")))
    assert storage.root == tmp_path / "files"


def test_in_memory_storage():
    storage = InMemoryBlobStorage()
    storage.write_bytes("signatures/sig.png", b"img")

    assert storage.exists("signatures/sig.png")
    assert storage.read_bytes("/signatures/sig.png") == b"img"
    with pytest.raises(StorageError):
        storage.read_bytes("signatures/other.png")
