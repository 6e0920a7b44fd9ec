"""
Data Transfer Objects for scan session queries.

Simple, serializable structures handed from the application layer to the API.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from cookscan.domain.entities.scan_session import ScanSession
from cookscan.domain.entities.scanned_recipe import ScannedRecipePreview


@dataclass(frozen=True)
class RecipePreviewDTO:
    recipe_id: str
    title: str
    ingredient_count: int
    instruction_count: int

    @classmethod
    def from_preview(cls, preview: ScannedRecipePreview) -> "RecipePreviewDTO":
        return cls(
            recipe_id=preview.recipe_id,
            title=preview.title,
            ingredient_count=preview.ingredient_count,
            instruction_count=preview.instruction_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipe_id": self.recipe_id,
            "title": self.title,
            "ingredient_count": self.ingredient_count,
            "instruction_count": self.instruction_count,
        }


@dataclass(frozen=True)
class ScanSessionSummaryDTO:
    """DTO for a session in a list (summary view)."""

    session_id: str
    book_name: str
    status: str
    recipe_count: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    physical_cookbook_id: Optional[str] = None
    cover_image_ref: Optional[str] = None

    @classmethod
    def from_session(cls, session: ScanSession) -> "ScanSessionSummaryDTO":
        return cls(
            session_id=session.session_id,
            book_name=session.book_name,
            status=session.status.value,
            recipe_count=session.recipe_count,
            created_at=session.created_at,
            updated_at=session.updated_at,
            completed_at=session.completed_at,
            physical_cookbook_id=session.physical_cookbook_id,
            cover_image_ref=session.cover_image_ref,
        )


@dataclass(frozen=True)
class ScanSessionDetailDTO:
    """DTO for a single session with previews of its recipes."""

    session_id: str
    book_name: str
    status: str
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    physical_cookbook_id: Optional[str] = None
    cover_image_ref: Optional[str] = None
    recipes: List[RecipePreviewDTO] = field(default_factory=list)

    @property
    def recipe_count(self) -> int:
        return len(self.recipes)

    @classmethod
    def from_session(
        cls,
        session: ScanSession,
        previews: List[ScannedRecipePreview],
    ) -> "ScanSessionDetailDTO":
        return cls(
            session_id=session.session_id,
            book_name=session.book_name,
            status=session.status.value,
            created_at=session.created_at,
            updated_at=session.updated_at,
            completed_at=session.completed_at,
            physical_cookbook_id=session.physical_cookbook_id,
            cover_image_ref=session.cover_image_ref,
            recipes=[RecipePreviewDTO.from_preview(preview) for preview in previews],
        )
