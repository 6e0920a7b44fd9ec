"""
ExtractedPageData Entity - Structured recipe data read from one page.

Produced by the extraction service for a single photograph and by the
multi-page merger for a combined recipe.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from cookscan.domain.value_objects.ingredient import Ingredient

_PAGE_PREFIX = re.compile(r"^(?:page|pg|p)\.?\s*(?=\d)", re.IGNORECASE)
_LEADING_DIGITS = re.compile(r"^(\d+)")


def _to_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def _to_page_number(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def _to_page_label(value: Any) -> str:
    """Printed page reference without a leading ``p.``/``page``; "" when absent."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value) if value > 0 else ""
    if isinstance(value, float):
        return str(int(value)) if math.isfinite(value) and value >= 1 else ""
    return _PAGE_PREFIX.sub("", str(value).strip())


def _label_page_number(label: str) -> Optional[int]:
    match = _LEADING_DIGITS.match(label)
    if match is None:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


@dataclass(frozen=True)
class ExtractedPageData:
    """
    Immutable per-page recipe data.

    Numeric fields use 0 for "unknown". `page_label` is the page reference
    as printed ("42", "42a", "xii"); `page_number` is its numeric value used
    for ordering, None when the label has none.
    """

    title: str = ""
    ingredients: Tuple[Ingredient, ...] = field(default_factory=tuple)
    instructions: Tuple[str, ...] = field(default_factory=tuple)
    servings: int = 0
    prep_time: int = 0
    cook_time: int = 0
    page_number: Optional[int] = None
    page_label: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'title', (self.title or "").strip())
        object.__setattr__(self, 'ingredients', tuple(self.ingredients or ()))
        object.__setattr__(
            self,
            'instructions',
            tuple(str(step).strip() for step in (self.instructions or ()) if str(step).strip()),
        )
        object.__setattr__(self, 'servings', _to_count(self.servings))
        object.__setattr__(self, 'prep_time', _to_count(self.prep_time))
        object.__setattr__(self, 'cook_time', _to_count(self.cook_time))

        label = _to_page_label(self.page_label) or _to_page_label(self.page_number)
        number = _to_page_number(self.page_number)
        if number is None:
            number = _label_page_number(label)
        object.__setattr__(self, 'page_label', label or (str(number) if number else ""))
        object.__setattr__(self, 'page_number', number)

    @classmethod
    def empty(cls) -> ExtractedPageData:
        """Recipe shape with no content."""
        return cls()

    def is_empty(self) -> bool:
        return not self.title and not self.ingredients and not self.instructions

    def with_title(self, title: str) -> ExtractedPageData:
        """Return a copy with a different title."""
        return replace(self, title=title)

    @property
    def ingredient_count(self) -> int:
        return len(self.ingredients)

    @property
    def instruction_count(self) -> int:
        return len(self.instructions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExtractedPageData:
        """
        Create ExtractedPageData from a loose dictionary.

        Accepts both snake_case and camelCase keys (``prep_time``/``prepTime``).
        Ingredients may be dictionaries or bare strings.
        """
        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        raw_ingredients: Iterable[Any] = pick("ingredients") or []
        ingredients = []
        for item in raw_ingredients:
            if isinstance(item, Ingredient):
                ingredients.append(item)
            elif isinstance(item, dict):
                ingredient = Ingredient.from_dict(item)
                if ingredient.name:
                    ingredients.append(ingredient)
            elif isinstance(item, str) and item.strip():
                ingredients.append(Ingredient(name=item))

        raw_instructions = pick("instructions") or []
        if isinstance(raw_instructions, str):
            raw_instructions = [raw_instructions]

        return cls(
            title=str(pick("title") or ""),
            ingredients=tuple(ingredients),
            instructions=tuple(str(step) for step in raw_instructions),
            servings=pick("servings") or 0,
            prep_time=pick("prep_time", "prepTime") or 0,
            cook_time=pick("cook_time", "cookTime") or 0,
            page_number=pick("page_number", "pageNumber"),
            page_label=pick("page_label", "pageLabel") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "instructions": list(self.instructions),
            "servings": self.servings,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "page_number": self.page_number,
            "page_label": self.page_label,
        }
