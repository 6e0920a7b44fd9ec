"""Domain repository interfaces."""

from .image_storage import ImageStorage
from .physical_cookbook_repository import PhysicalCookbookRepository
from .scan_session_repository import ScanSessionRepository
from .scanned_recipe_repository import ScannedRecipeRepository

__all__ = [
    "ImageStorage",
    "PhysicalCookbookRepository",
    "ScanSessionRepository",
    "ScannedRecipeRepository",
]
