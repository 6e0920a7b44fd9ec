"""Workflow steps a user moves through while scanning a cookbook."""
from __future__ import annotations

from enum import Enum


class ScanStep(str, Enum):
    """Top-level steps of the scan workflow."""
    COVER = "cover"
    SCANNING = "scanning"
    PROCESSING = "processing"
    REVIEW = "review"
    COMPLETE = "complete"
    CLOSED = "closed"

    def is_interactive(self) -> bool:
        """Steps where the user can act (everything except processing and closed)."""
        return self not in {ScanStep.PROCESSING, ScanStep.CLOSED}

    def is_terminal(self) -> bool:
        return self is ScanStep.CLOSED
