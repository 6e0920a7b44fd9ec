"""
ScanError value object

A failure converted into the scan workflow's error taxonomy, paired with the
step the workflow falls back to.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from cookscan.domain.value_objects.scan_step import ScanStep


class ScanErrorKind(str, Enum):
    """Error taxonomy surfaced to the user."""
    UPLOAD_ERROR = "UPLOAD_ERROR"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    SESSION_ERROR = "SESSION_ERROR"


@dataclass(frozen=True)
class ScanError:
    """
    Immutable user-facing error.

    Every error is recoverable by retrying the triggering action; the
    workflow never retries on its own because the input image may need to
    be recaptured.
    """
    kind: ScanErrorKind
    message: str
    recovery_step: ScanStep
    detail: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return True

    @property
    def auto_retry(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the {kind, message} pair shown in the error banner."""
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
            "recovery_step": self.recovery_step.value,
        }
        if self.detail:
            payload["detail"] = self.detail
        return payload

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
