"""Image helpers used by the infrastructure layer."""
from __future__ import annotations

import base64
from mimetypes import guess_extension

from cookscan.domain.value_objects.captured_image import CapturedImage

_KNOWN_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
}


def image_to_data_url(image: CapturedImage) -> str:
    """Convert a captured image to a data URL suitable for OpenAI Vision."""

    encoded = base64.b64encode(image.data).decode("utf-8")
    return f"data:{image.mime_type};base64,{encoded}"


def extension_for_mime(mime_type: str) -> str:
    """File extension for an image MIME type, ``.img`` when unknown."""

    mime = (mime_type or "").lower()
    return _KNOWN_EXTENSIONS.get(mime) or guess_extension(mime) or ".img"
