"""
Unit tests for SaveScannedRecipe and ResolveCookbook command handlers.
"""
import pytest

from cookscan.application.commands.resolve_cookbook import (
    ResolveCookbookCommand,
    ResolveCookbookHandler,
)
from cookscan.application.commands.save_scanned_recipe import (
    SaveScannedRecipeCommand,
    SaveScannedRecipeHandler,
)
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.entities.physical_cookbook import PhysicalCookbook
from cookscan.domain.exceptions import EntityNotFoundError, EntityValidationError
from cookscan.domain.value_objects.ingredient import Ingredient


@pytest.fixture
def save_handler(recipe_repository, cookbook_repository):
    return SaveScannedRecipeHandler(recipe_repository, cookbook_repository, id_factory=lambda: "r1")


@pytest.fixture
def resolve_handler(cookbook_repository):
    return ResolveCookbookHandler(cookbook_repository, id_factory=lambda: "cb-new")


PAGE = ExtractedPageData(
    title="Shakshuka",
    ingredients=(Ingredient(name="eggs", quantity=4), Ingredient(name="tomatoes")),
    instructions=("Simmer sauce", "Poach eggs"),
    servings=2,
    page_number=64,
)


class TestSaveScannedRecipe:
    """SaveScannedRecipeHandler behaviour."""

    @pytest.mark.asyncio
    async def test_saves_recipe_with_scanned_source(self, save_handler, recipe_repository):
        recipe = await save_handler.handle(
            SaveScannedRecipeCommand(user_id="u1", page=PAGE, page_reference="64", session_id="s1")
        )

        assert recipe_repository.recipes["r1"] is recipe
        assert recipe.source == "scanned"
        assert recipe.title == "Shakshuka"
        assert recipe.page_reference == "64"
        assert recipe.session_id == "s1"
        assert recipe.servings == 2

    @pytest.mark.asyncio
    async def test_blank_title_becomes_untitled(self, save_handler):
        recipe = await save_handler.handle(
            SaveScannedRecipeCommand(user_id="u1", page=PAGE.with_title(""))
        )
        assert recipe.title == "Untitled Recipe"

    @pytest.mark.asyncio
    async def test_links_owned_cookbook(self, save_handler, cookbook_repository):
        await cookbook_repository.save(PhysicalCookbook.create("cb1", "u1", "Jerusalem"))
        recipe = await save_handler.handle(
            SaveScannedRecipeCommand(user_id="u1", page=PAGE, physical_cookbook_id="cb1")
        )
        assert recipe.physical_cookbook_id == "cb1"

    @pytest.mark.asyncio
    async def test_foreign_cookbook_is_rejected(self, save_handler, cookbook_repository, recipe_repository):
        await cookbook_repository.save(PhysicalCookbook.create("cb2", "u2", "Not Yours"))
        with pytest.raises(EntityNotFoundError):
            await save_handler.handle(
                SaveScannedRecipeCommand(user_id="u1", page=PAGE, physical_cookbook_id="cb2")
            )
        assert recipe_repository.recipes == {}


class TestResolveCookbook:
    """ResolveCookbookHandler get-or-create behaviour."""

    @pytest.mark.asyncio
    async def test_creates_missing_cookbook(self, resolve_handler, cookbook_repository):
        cookbook = await resolve_handler.handle(
            ResolveCookbookCommand(user_id="u1", name="  Plenty ", author="Ottolenghi")
        )
        assert cookbook.cookbook_id == "cb-new"
        assert cookbook.name == "Plenty"
        assert cookbook_repository.cookbooks["cb-new"].author == "Ottolenghi"

    @pytest.mark.asyncio
    async def test_reuses_existing_by_name(self, resolve_handler, cookbook_repository):
        await cookbook_repository.save(PhysicalCookbook.create("cb1", "u1", "Plenty"))
        cookbook = await resolve_handler.handle(
            ResolveCookbookCommand(user_id="u1", name="plenty", cover_image_ref="images/1")
        )
        assert cookbook.cookbook_id == "cb1"
        assert cookbook.cover_image_ref == "images/1"
        assert len(cookbook_repository.cookbooks) == 1

    @pytest.mark.asyncio
    async def test_existing_values_are_not_overwritten(self, resolve_handler, cookbook_repository):
        await cookbook_repository.save(PhysicalCookbook.create("cb1", "u1", "Plenty", author="Ottolenghi"))
        cookbook = await resolve_handler.handle(
            ResolveCookbookCommand(user_id="u1", name="Plenty", author="Someone")
        )
        assert cookbook.author == "Ottolenghi"

    @pytest.mark.asyncio
    async def test_other_users_books_are_separate(self, resolve_handler, cookbook_repository):
        await cookbook_repository.save(PhysicalCookbook.create("cb1", "u2", "Plenty"))
        cookbook = await resolve_handler.handle(ResolveCookbookCommand(user_id="u1", name="Plenty"))
        assert cookbook.cookbook_id == "cb-new"

    @pytest.mark.asyncio
    async def test_blank_name_is_rejected(self, resolve_handler):
        with pytest.raises(EntityValidationError):
            await resolve_handler.handle(ResolveCookbookCommand(user_id="u1", name="   "))
