"""File-based implementation of ImageStorage."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from cookscan.domain.exceptions import ImageUploadError
from cookscan.domain.repositories.image_storage import ImageStorage
from cookscan.infrastructure.images.image_processor import extension_for_mime

logger = logging.getLogger(__name__)


class FileImageStorage(ImageStorage):
    """Store uploaded images under ``<base_dir>/images``; references are relative paths."""

    def __init__(self, base_dir: str | Path = "scan_data") -> None:
        self.base_dir = Path(base_dir)
        self.images_dir = self.base_dir / "images"

    async def upload_image(self, data: bytes, mime_type: str) -> str:
        if not data:
            raise ImageUploadError("Refusing to store an empty image")
        if not (mime_type or "").lower().startswith("image/"):
            raise ImageUploadError(f"Unsupported image type {mime_type!r}")
        return await asyncio.to_thread(self._write, data, mime_type)

    def resolve(self, ref: str) -> Path:
        """Absolute path of a stored image reference."""
        path = (self.base_dir / ref).resolve()
        if self.images_dir.resolve() not in path.parents:
            raise ImageUploadError(f"Image reference outside storage: {ref!r}")
        return path

    def _write(self, data: bytes, mime_type: str) -> str:
        filename = f"{uuid.uuid4().hex}{extension_for_mime(mime_type)}"
        path = self.images_dir / filename
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self.images_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as exc:
            raise ImageUploadError(f"Failed to store image {filename}", exc)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)
        logger.debug("Stored image %s (%d bytes)", filename, len(data))
        return f"images/{filename}"
