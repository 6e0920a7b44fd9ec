"""
API Schemas - organized by domain
"""
from .scan_session_schemas import (
    RecipePreviewSchema,
    ScanSessionDetailSchema,
    ScanSessionListResponseSchema,
    ScanSessionSummarySchema,
    detail_to_schema,
    preview_to_schema,
    summary_to_schema,
)

__all__ = [
    "RecipePreviewSchema",
    "ScanSessionDetailSchema",
    "ScanSessionListResponseSchema",
    "ScanSessionSummarySchema",
    "detail_to_schema",
    "preview_to_schema",
    "summary_to_schema",
]
