"""Domain entities package"""

from .extracted_page import ExtractedPageData
from .page_accumulator import PageAccumulator
from .physical_cookbook import PhysicalCookbook
from .scan_session import ScanSession
from .scanned_recipe import ScannedRecipe, ScannedRecipePreview

__all__ = [
    "ExtractedPageData",
    "PageAccumulator",
    "PhysicalCookbook",
    "ScanSession",
    "ScannedRecipe",
    "ScannedRecipePreview",
]
