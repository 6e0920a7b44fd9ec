"""
ScannedRecipe Entity - A recipe saved from photographed cookbook pages.

Also defines the ScannedRecipePreview projection shown in session summaries.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from cookscan.constants import RECIPE_SOURCE_SCANNED
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.value_objects.ingredient import Ingredient


@dataclass(frozen=True)
class ScannedRecipePreview:
    """Lightweight summary of a saved recipe."""

    recipe_id: str
    title: str
    ingredient_count: int
    instruction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipe_id": self.recipe_id,
            "title": self.title,
            "ingredient_count": self.ingredient_count,
            "instruction_count": self.instruction_count,
        }


@dataclass(frozen=True)
class ScannedRecipe:
    """
    Persisted recipe record.

    ``page_reference`` is the formatted page range the recipe was read from
    (``"42"``, ``"pp. 42-43"``); ``session_id`` links back to the scan session
    that produced it, if any.
    """

    recipe_id: str
    user_id: str
    title: str
    ingredients: Tuple[Ingredient, ...] = field(default_factory=tuple)
    instructions: Tuple[str, ...] = field(default_factory=tuple)
    servings: int = 0
    prep_time: int = 0
    cook_time: int = 0
    source: str = RECIPE_SOURCE_SCANNED
    physical_cookbook_id: Optional[str] = None
    page_reference: Optional[str] = None
    session_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        recipe_id: str,
        user_id: str,
        page: ExtractedPageData,
        physical_cookbook_id: Optional[str] = None,
        page_reference: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> ScannedRecipe:
        """Build a recipe record from extracted (possibly merged) page data."""
        return cls(
            recipe_id=recipe_id,
            user_id=user_id,
            title=page.title,
            ingredients=tuple(page.ingredients),
            instructions=tuple(page.instructions),
            servings=page.servings,
            prep_time=page.prep_time,
            cook_time=page.cook_time,
            source=RECIPE_SOURCE_SCANNED,
            physical_cookbook_id=physical_cookbook_id,
            page_reference=page_reference or None,
            session_id=session_id,
            created_at=datetime.now(),
        )

    def to_preview(self) -> ScannedRecipePreview:
        return ScannedRecipePreview(
            recipe_id=self.recipe_id,
            title=self.title,
            ingredient_count=len(self.ingredients),
            instruction_count=len(self.instructions),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScannedRecipe:
        created_at = data.get("created_at")
        return cls(
            recipe_id=data["recipe_id"],
            user_id=data["user_id"],
            title=data.get("title") or "",
            ingredients=tuple(Ingredient.from_dict(item) for item in data.get("ingredients") or []),
            instructions=tuple(data.get("instructions") or []),
            servings=int(data.get("servings") or 0),
            prep_time=int(data.get("prep_time") or 0),
            cook_time=int(data.get("cook_time") or 0),
            source=data.get("source") or RECIPE_SOURCE_SCANNED,
            physical_cookbook_id=data.get("physical_cookbook_id"),
            page_reference=data.get("page_reference"),
            session_id=data.get("session_id"),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipe_id": self.recipe_id,
            "user_id": self.user_id,
            "title": self.title,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "instructions": list(self.instructions),
            "servings": self.servings,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "source": self.source,
            "physical_cookbook_id": self.physical_cookbook_id,
            "page_reference": self.page_reference,
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
        }
