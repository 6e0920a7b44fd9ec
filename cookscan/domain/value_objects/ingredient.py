"""
Ingredient value object

One ingredient line read from a cookbook page.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


def _to_quantity(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 1.0
    try:
        quantity = float(value)
    except OverflowError:
        return 1.0
    return quantity if math.isfinite(quantity) else 1.0


class IngredientCategory(str, Enum):
    """Shopping categories an ingredient can belong to."""
    MEAT = "meat"
    PRODUCE = "produce"
    DAIRY = "dairy"
    PANTRY = "pantry"
    SPICES = "spices"
    CONDIMENTS = "condiments"
    BREAD = "bread"
    OTHER = "other"

    @classmethod
    def normalize(cls, value: Any) -> IngredientCategory:
        """Return the matching category, falling back to OTHER for unknown values."""
        if isinstance(value, IngredientCategory):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Ingredient:
    """
    Immutable ingredient line.

    Quantity defaults to 1 and unit to "item" when the page does not state them.
    """
    name: str
    quantity: float = 1.0
    unit: str = "item"
    category: IngredientCategory = IngredientCategory.OTHER

    def __post_init__(self):
        """Normalize name, quantity and category."""
        object.__setattr__(self, 'name', (self.name or "").strip())
        if not isinstance(self.category, IngredientCategory):
            object.__setattr__(self, 'category', IngredientCategory.normalize(self.category))
        object.__setattr__(self, 'quantity', _to_quantity(self.quantity))
        if not self.unit:
            object.__setattr__(self, 'unit', "item")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Ingredient:
        """Create Ingredient from dictionary."""
        unit = data.get("unit")
        return cls(
            name=str(data.get("name") or ""),
            quantity=data.get("quantity", 1.0),
            unit=str(unit) if unit else "item",
            category=IngredientCategory.normalize(data.get("category")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category.value,
        }
