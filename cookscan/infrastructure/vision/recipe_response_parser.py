"""Parse Azure OpenAI vision payloads into extraction outcomes."""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from cookscan.application.scanning.ports import CookbookNameOutcome, ExtractionOutcome
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.value_objects.ingredient import Ingredient, IngredientCategory

PARSE_ERROR = "PARSE_ERROR"
NO_TITLE = "NO_TITLE"
NO_NAME = "NO_NAME"
EXTRACTION_FAILED = "EXTRACTION_FAILED"


class RecipeResponseParser:
    """Converts raw JSON payloads from the vision model into outcomes."""

    def parse_recipe(self, payload: Any) -> ExtractionOutcome:
        if not isinstance(payload, dict):
            return ExtractionOutcome.failed(PARSE_ERROR, "Failed to parse AI response")

        if payload.get("success") is False:
            return ExtractionOutcome.failed(
                _safe_str(payload.get("error")) or EXTRACTION_FAILED,
                _safe_str(payload.get("message")) or "Failed to extract recipe",
            )

        title = _safe_str(payload.get("title"))
        if not title:
            return ExtractionOutcome.failed(NO_TITLE, "Could not extract recipe title")

        page = ExtractedPageData(
            title=title,
            ingredients=tuple(self._parse_ingredients(payload.get("ingredients"))),
            instructions=tuple(self._parse_instructions(payload.get("instructions"))),
            servings=_safe_int(payload.get("servings")),
            prep_time=_safe_int(_first_present(payload, "prepTime", "prep_time")),
            cook_time=_safe_int(_first_present(payload, "cookTime", "cook_time")),
            page_label=_safe_page_label(_first_present(payload, "pageNumber", "page_number")),
        )
        return ExtractionOutcome.ok(page)

    def parse_cover(self, payload: Any) -> CookbookNameOutcome:
        if not isinstance(payload, dict):
            return CookbookNameOutcome.failed(PARSE_ERROR, "Failed to parse AI response")

        if payload.get("success") is False:
            return CookbookNameOutcome.failed(
                _safe_str(payload.get("error")) or EXTRACTION_FAILED,
                _safe_str(payload.get("message")) or "Failed to extract cookbook name",
            )

        name = _safe_str(payload.get("name"))
        if not name:
            return CookbookNameOutcome.failed(NO_NAME, "Could not extract cookbook name")

        return CookbookNameOutcome(success=True, name=name, author=_safe_str(payload.get("author")) or None)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _parse_ingredients(self, raw: Any) -> List[Ingredient]:
        if not isinstance(raw, list):
            return []
        ingredients: List[Ingredient] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            name = _safe_str(entry.get("name"))
            if not name:
                continue
            quantity = _safe_float(entry.get("quantity"))
            unit = _safe_str(entry.get("unit"))
            ingredients.append(
                Ingredient(
                    name=name,
                    quantity=quantity if quantity is not None else 1.0,
                    unit=unit or "item",
                    category=IngredientCategory.normalize(entry.get("category")),
                )
            )
        return ingredients

    def _parse_instructions(self, raw: Any) -> List[str]:
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list):
            return []
        return [step.strip() for step in raw if isinstance(step, str) and step.strip()]


def _first_present(payload: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _safe_int(value: Any) -> int:
    number = _safe_float(value)
    if number is None or number < 0:
        return 0
    return int(round(number))


def _safe_page_label(value: Any) -> str:
    """The page reference as printed: ``42``, ``"p. 42"``, ``"42a"`` or ``"xii"``."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        number = _safe_float(value)
        return str(int(number)) if number is not None and number >= 1 else ""
    if isinstance(value, str):
        return value.strip()
    return ""
