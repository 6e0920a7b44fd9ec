"""
Schemas for scan session endpoints
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from cookscan.application.dto.scan_session_dto import (
    RecipePreviewDTO,
    ScanSessionDetailDTO,
    ScanSessionSummaryDTO,
)


class RecipePreviewSchema(BaseModel):
    id: str
    title: str
    ingredientCount: int
    instructionCount: int


class ScanSessionSummarySchema(BaseModel):
    id: str
    bookName: str
    status: str
    recipeCount: int
    createdAt: datetime
    updatedAt: datetime
    completedAt: Optional[datetime] = None
    physicalCookbookId: Optional[str] = None
    coverImageRef: Optional[str] = None


class ScanSessionDetailSchema(ScanSessionSummarySchema):
    recipes: List[RecipePreviewSchema] = Field(default_factory=list)


class ScanSessionListResponseSchema(BaseModel):
    sessions: List[ScanSessionSummarySchema] = Field(default_factory=list)
    total: int = 0


def preview_to_schema(preview: RecipePreviewDTO) -> RecipePreviewSchema:
    return RecipePreviewSchema(
        id=preview.recipe_id,
        title=preview.title,
        ingredientCount=preview.ingredient_count,
        instructionCount=preview.instruction_count,
    )


def summary_to_schema(dto: ScanSessionSummaryDTO) -> ScanSessionSummarySchema:
    return ScanSessionSummarySchema(
        id=dto.session_id,
        bookName=dto.book_name,
        status=dto.status,
        recipeCount=dto.recipe_count,
        createdAt=dto.created_at,
        updatedAt=dto.updated_at,
        completedAt=dto.completed_at,
        physicalCookbookId=dto.physical_cookbook_id,
        coverImageRef=dto.cover_image_ref,
    )


def detail_to_schema(dto: ScanSessionDetailDTO) -> ScanSessionDetailSchema:
    return ScanSessionDetailSchema(
        id=dto.session_id,
        bookName=dto.book_name,
        status=dto.status,
        recipeCount=dto.recipe_count,
        createdAt=dto.created_at,
        updatedAt=dto.updated_at,
        completedAt=dto.completed_at,
        physicalCookbookId=dto.physical_cookbook_id,
        coverImageRef=dto.cover_image_ref,
        recipes=[preview_to_schema(preview) for preview in dto.recipes],
    )
