"""Vision infrastructure adapters."""

from .azure_recipe_extraction_client import AzureRecipeExtractionClient
from .recipe_prompt_builder import (
    COVER_PROMPT_TEMPLATE,
    RECIPE_PROMPT_TEMPLATE,
    build_cover_attempts,
    build_recipe_attempts,
)
from .recipe_response_parser import RecipeResponseParser

__all__ = [
    "AzureRecipeExtractionClient",
    "RecipeResponseParser",
    "build_cover_attempts",
    "build_recipe_attempts",
    "COVER_PROMPT_TEMPLATE",
    "RECIPE_PROMPT_TEMPLATE",
]
