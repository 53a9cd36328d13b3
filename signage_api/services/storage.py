import os
import hashlib
from dataclasses import dataclass
from urllib.parse import urlparse

MEDIA_ROOT = os.getenv("SIGNAGE_MEDIA_ROOT", "public")
CHECKSUM_CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class FileMetadata:
    size: int
    checksum: str


def media_file_path(url: str | None, media_root: str | None = None) -> str | None:
    """Map a server-relative media URL (``/uploads/a.mp4``) to a file under the media root.

    Remote URLs and paths that would escape the root yield ``None``.
    """
    raw = (url or "").strip()
    if not raw:
        return None
    try:
        parsed = urlparse(raw)
    except ValueError:
        return None
    if parsed.scheme or parsed.netloc:
        return None
    relative = parsed.path.replace("\\", "/").lstrip("/")
    if not relative:
        return None
    root = os.path.abspath(media_root or MEDIA_ROOT)
    candidate = os.path.abspath(os.path.join(root, relative))
    if os.path.commonpath([root, candidate]) != root:
        return None
    return candidate


def file_checksum(path: str) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHECKSUM_CHUNK_BYTES), b""):
            digest.update(chunk)
    return digest.hexdigest()


def file_metadata(path: str) -> FileMetadata:
    size = os.path.getsize(path)
    return FileMetadata(size=size, checksum=file_checksum(path))