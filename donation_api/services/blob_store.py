"""Where uploaded evidence files end up. Only the URL is kept in the database."""

import asyncio
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from donation_api.services.validation import sanitize_text

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

ALLOWED_CONTENT_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "video/mp4",
    "video/quicktime",
)

_UNSAFE_EXT_RE = re.compile(r"[^a-zA-Z0-9]")


def build_file_key(original_name: Optional[str]) -> str:
    """``activity_<ms>_<random>.<ext>`` with an alphanumeric extension."""
    name = sanitize_text(original_name or "", 255)
    ext = name.rsplit(".", 1)[-1] if "." in name else ""
    ext = _UNSAFE_EXT_RE.sub("", ext)[:10] or "bin"
    return f"activity_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{ext}"


class BlobStore:
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Files on local disk, served by the app's ``/uploads`` mount or a CDN in front of it."""

    def __init__(self, directory: str, public_base_url: Optional[str] = None):
        self.directory = Path(directory)
        self.public_base_url = (public_base_url or "/uploads").rstrip("/")

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self.directory / key
        await asyncio.to_thread(self._write, path, data)
        return f"{self.public_base_url}/{key}"

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
