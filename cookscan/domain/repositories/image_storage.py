"""Image storage interface (Abstract Base Class)."""

from abc import ABC, abstractmethod


class ImageStorage(ABC):
    """Stores captured images and hands back an opaque reference."""

    @abstractmethod
    async def upload_image(self, data: bytes, mime_type: str) -> str:
        """
        Store image bytes and return a reference to them.

        Raises:
            ImageUploadError: If the image could not be stored
        """
