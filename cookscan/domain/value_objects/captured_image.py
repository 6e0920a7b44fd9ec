"""
CapturedImage value object

Raw bytes of a photographed cover or recipe page, as handed over by the camera.
"""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass


@dataclass(frozen=True)
class CapturedImage:
    """Immutable image payload with its MIME type."""

    data: bytes
    mime_type: str = "image/jpeg"

    def __post_init__(self):
        """Validate image payload."""
        if not isinstance(self.data, (bytes, bytearray)) or len(self.data) == 0:
            raise ValueError("Captured image data must be non-empty bytes")
        if isinstance(self.data, bytearray):
            object.__setattr__(self, 'data', bytes(self.data))

        mime_type = (self.mime_type or "").strip().lower()
        if not mime_type.startswith("image/"):
            raise ValueError(f"Unsupported MIME type for captured image: {self.mime_type!r}")
        object.__setattr__(self, 'mime_type', mime_type)

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str = "image/jpeg") -> CapturedImage:
        """
        Create CapturedImage from base64 text, with or without a data URL prefix.

        Raises:
            ValueError: If the text is not valid base64
        """
        text = (encoded or "").strip()
        if text.startswith("data:") and "," in text:
            header, text = text.split(",", 1)
            declared = header[len("data:"):].split(";", 1)[0]
            if declared:
                mime_type = declared
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Captured image is not valid base64") from exc
        return cls(data=data, mime_type=mime_type)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")
