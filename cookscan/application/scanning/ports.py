"""Collaborator protocols the scan workflow depends on."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.value_objects.captured_image import CapturedImage


@dataclass(frozen=True)
class ExtractionOutcome:
    """Result of reading one recipe page."""

    success: bool
    page: Optional[ExtractedPageData] = None
    error_type: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, page: ExtractedPageData) -> ExtractionOutcome:
        return cls(success=True, page=page)

    @classmethod
    def failed(cls, error_type: str, message: str) -> ExtractionOutcome:
        return cls(success=False, error_type=error_type, message=message)


@dataclass(frozen=True)
class CookbookNameOutcome:
    """Result of reading a cookbook's title from its cover."""

    success: bool
    name: Optional[str] = None
    author: Optional[str] = None
    error_type: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def failed(cls, error_type: str, message: str) -> CookbookNameOutcome:
        return cls(success=False, error_type=error_type, message=message)


class RecipeExtractionClient(Protocol):
    """
    External service that turns photographs into structured data.

    Implementations report unreadable input as a failed outcome and may
    raise for transport errors. Calls may be repeated safely.
    """

    async def extract(self, image: CapturedImage) -> ExtractionOutcome:
        ...

    async def extract_cookbook_name(self, image: CapturedImage) -> CookbookNameOutcome:
        ...
