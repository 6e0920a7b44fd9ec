"""Scanned recipe repository interface (Abstract Base Class)."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from cookscan.domain.entities.scanned_recipe import ScannedRecipe


class ScannedRecipeRepository(ABC):
    """Abstract repository for saved recipes."""

    @abstractmethod
    async def save(self, recipe: ScannedRecipe) -> None:
        """Persist the recipe."""

    @abstractmethod
    async def find_by_id(self, recipe_id: str) -> Optional[ScannedRecipe]:
        """Return the recipe with the provided identifier, if it exists."""

    @abstractmethod
    async def find_by_ids(self, recipe_ids: Sequence[str]) -> List[ScannedRecipe]:
        """Return the recipes that exist, in the order of ``recipe_ids``."""
