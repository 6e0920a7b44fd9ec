"""File-based implementation of ScannedRecipeRepository."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

from cookscan.domain.entities.scanned_recipe import ScannedRecipe
from cookscan.domain.exceptions import RepositoryError
from cookscan.domain.repositories.scanned_recipe_repository import ScannedRecipeRepository
from cookscan.infrastructure.persistence.snapshot_store import JsonSnapshotStore


class FileScannedRecipeRepository(ScannedRecipeRepository):
    """Persist saved recipes as JSON snapshots on disk."""

    def __init__(self, base_dir: str | Path = "scan_data") -> None:
        self._store = JsonSnapshotStore(base_dir, "recipes")

    async def save(self, recipe: ScannedRecipe) -> None:
        await asyncio.to_thread(self._store.write, recipe.recipe_id, recipe.to_dict())

    async def find_by_id(self, recipe_id: str) -> Optional[ScannedRecipe]:
        return await asyncio.to_thread(self._find, recipe_id)

    async def find_by_ids(self, recipe_ids: Sequence[str]) -> List[ScannedRecipe]:
        return await asyncio.to_thread(self._find_many, list(recipe_ids))

    def _find_many(self, recipe_ids: List[str]) -> List[ScannedRecipe]:
        recipes = []
        for recipe_id in recipe_ids:
            recipe = self._find(recipe_id)
            if recipe is not None:
                recipes.append(recipe)
        return recipes

    def _find(self, recipe_id: str) -> Optional[ScannedRecipe]:
        data = self._store.read(recipe_id)
        if data is None:
            return None
        try:
            return ScannedRecipe.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Failed to hydrate recipe {recipe_id}", exc)
