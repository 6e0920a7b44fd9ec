"""SaveScannedRecipe Command - Persists a recipe read from cookbook pages.

Verifies the linked cookbook belongs to the user, applies the untitled
fallback and stores the recipe with source "scanned". Recording the recipe
into its scan session is the session lifecycle's job.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from cookscan.constants import UNTITLED_RECIPE_TITLE
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.entities.scanned_recipe import ScannedRecipe
from cookscan.domain.exceptions import EntityNotFoundError
from cookscan.domain.repositories.physical_cookbook_repository import PhysicalCookbookRepository
from cookscan.domain.repositories.scanned_recipe_repository import ScannedRecipeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveScannedRecipeCommand:
    user_id: str
    page: ExtractedPageData
    physical_cookbook_id: Optional[str] = None
    page_reference: Optional[str] = None
    session_id: Optional[str] = None


class SaveScannedRecipeHandler:
    """Handles SaveScannedRecipe commands."""

    def __init__(
        self,
        recipe_repository: ScannedRecipeRepository,
        cookbook_repository: PhysicalCookbookRepository,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._recipes = recipe_repository
        self._cookbooks = cookbook_repository
        self._id_factory = id_factory

    async def handle(self, command: SaveScannedRecipeCommand) -> ScannedRecipe:
        """
        Save the recipe and return the stored record.

        Raises:
            EntityNotFoundError: If the cookbook does not exist for this user
            RepositoryError: If persistence fails
        """
        if command.physical_cookbook_id:
            cookbook = await self._cookbooks.find_by_id(command.physical_cookbook_id)
            if cookbook is None or cookbook.user_id != command.user_id:
                raise EntityNotFoundError("PhysicalCookbook", command.physical_cookbook_id)

        page = command.page
        if not page.title:
            page = page.with_title(UNTITLED_RECIPE_TITLE)

        recipe = ScannedRecipe.create(
            recipe_id=self._id_factory(),
            user_id=command.user_id,
            page=page,
            physical_cookbook_id=command.physical_cookbook_id,
            page_reference=command.page_reference,
            session_id=command.session_id,
        )
        await self._recipes.save(recipe)
        logger.info(
            "Scanned recipe saved",
            extra={
                "recipe_id": recipe.recipe_id,
                "session_id": command.session_id,
                "ingredient_count": len(recipe.ingredients),
                "instruction_count": len(recipe.instructions),
            },
        )
        return recipe
