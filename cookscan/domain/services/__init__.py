"""
Domain services for business logic that doesn't belong to a specific entity.

- MultiPageMerger: combines pages of one recipe
- ErrorRecoveryPolicy: classifies workflow failures
"""
from .error_recovery_policy import ErrorRecoveryPolicy, FailureStage
from .multi_page_merger import (
    MultiPageMerger,
    format_page_range,
    is_recipe_incomplete,
    merge_pages,
)

__all__ = [
    "ErrorRecoveryPolicy",
    "FailureStage",
    "MultiPageMerger",
    "format_page_range",
    "is_recipe_incomplete",
    "merge_pages",
]
