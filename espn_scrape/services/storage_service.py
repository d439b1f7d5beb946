import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Protocol

from espn_scrape.config import settings

logger = logging.getLogger(__name__)


def content_type_for(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


def extension_for(content_type: Optional[str], default: str = ".png") -> str:
    extension = mimetypes.guess_extension(content_type or "")
    return extension or default


class BlobStorage(Protocol):
    async def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store ``data`` at ``bucket/path`` (overwriting) and return its public URL."""
        ...


class LocalBlobStorage:
    """BlobStorage backed by a directory tree: ``<root>/<bucket>/<path>``."""

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = Path(root or settings.storage_root)
        self.public_base_url = (public_base_url or settings.storage_public_base_url).rstrip("/")

    def _target(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        bucket_root = (self.root / bucket).resolve()
        if bucket_root not in target.parents:
            raise ValueError(f"Path escapes bucket {bucket!r}: {path!r}")
        return target

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path.lstrip('/')}"

    async def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._target(bucket, path)
        await asyncio.to_thread(self._write, target, data)
        logger.debug(f"Stored {len(data)} bytes ({content_type or content_type_for(path)}) at {target}")
        return self.public_url(bucket, path)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
