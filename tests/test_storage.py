import hashlib

import pytest

from signage_api.services import storage
from signage_api.services.storage import file_checksum, file_metadata, media_file_path


def test_relative_url_maps_under_root(media_root):
    assert media_file_path("/uploads/a.png") == str(media_root / "uploads" / "a.png")


def test_explicit_root_overrides_configured_one(tmp_path):
    assert media_file_path("uploads/a.png", str(tmp_path)) == str(tmp_path / "uploads" / "a.png")


@pytest.mark.parametrize(
    "url",
    [
        "",
        None,
        "   ",
        "/",
        "https://cdn.example.com/a.png",
        "//cdn.example.com/a.png",
        "/../../etc/passwd",
        "http://[broken/a.png",
    ],
)
def test_unmappable_urls(media_root, url):
    assert media_file_path(url) is None


def test_file_metadata(media_root):
    data = b"x" * (storage.CHECKSUM_CHUNK_BYTES + 17)
    path = media_root / "uploads" / "big.bin"
    path.write_bytes(data)

    metadata = file_metadata(str(path))

    assert metadata.size == len(data)
    assert metadata.checksum == hashlib.sha256(data).hexdigest()
    assert file_checksum(str(path)) == metadata.checksum


def test_missing_file_raises_os_error(media_root):
    with pytest.raises(OSError):
        file_metadata(str(media_root / "uploads" / "gone.mp4"))
