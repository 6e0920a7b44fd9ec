"""Pytest configuration for cookscan tests.

Puts the project root on sys.path so ``cookscan.*`` imports resolve without
an install, and provides in-memory repositories shared by the unit tests.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cookscan.domain.entities.physical_cookbook import PhysicalCookbook  # noqa: E402
from cookscan.domain.entities.scan_session import ScanSession  # noqa: E402
from cookscan.domain.entities.scanned_recipe import ScannedRecipe  # noqa: E402
from cookscan.domain.exceptions import ImageUploadError  # noqa: E402
from cookscan.domain.repositories import (  # noqa: E402
    ImageStorage,
    PhysicalCookbookRepository,
    ScanSessionRepository,
    ScannedRecipeRepository,
)
from cookscan.domain.value_objects.session_status import SessionStatus  # noqa: E402


class InMemoryScanSessionRepository(ScanSessionRepository):
    def __init__(self) -> None:
        self.sessions: Dict[str, ScanSession] = {}
        self.save_calls = 0

    async def save(self, session: ScanSession) -> None:
        self.save_calls += 1
        self.sessions[session.session_id] = session

    async def find_by_id(self, session_id: str) -> Optional[ScanSession]:
        return self.sessions.get(session_id)

    async def find_by_user(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None,
    ) -> List[ScanSession]:
        matches = [
            session
            for session in self.sessions.values()
            if session.user_id == user_id and (status is None or session.status is status)
        ]
        matches.sort(key=lambda session: session.created_at, reverse=True)
        return matches if limit is None else matches[:limit]


class InMemoryScannedRecipeRepository(ScannedRecipeRepository):
    def __init__(self) -> None:
        self.recipes: Dict[str, ScannedRecipe] = {}
        self.fail_next: Optional[Exception] = None

    async def save(self, recipe: ScannedRecipe) -> None:
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc
        self.recipes[recipe.recipe_id] = recipe

    async def find_by_id(self, recipe_id: str) -> Optional[ScannedRecipe]:
        return self.recipes.get(recipe_id)

    async def find_by_ids(self, recipe_ids: Sequence[str]) -> List[ScannedRecipe]:
        return [self.recipes[recipe_id] for recipe_id in recipe_ids if recipe_id in self.recipes]


class InMemoryPhysicalCookbookRepository(PhysicalCookbookRepository):
    def __init__(self) -> None:
        self.cookbooks: Dict[str, PhysicalCookbook] = {}

    async def save(self, cookbook: PhysicalCookbook) -> None:
        self.cookbooks[cookbook.cookbook_id] = cookbook

    async def find_by_id(self, cookbook_id: str) -> Optional[PhysicalCookbook]:
        return self.cookbooks.get(cookbook_id)

    async def find_by_name(self, user_id: str, name: str) -> Optional[PhysicalCookbook]:
        for cookbook in self.cookbooks.values():
            if cookbook.user_id == user_id and cookbook.matches_name(name):
                return cookbook
        return None


class InMemoryImageStorage(ImageStorage):
    def __init__(self) -> None:
        self.images: Dict[str, bytes] = {}
        self.fail = False

    async def upload_image(self, data: bytes, mime_type: str) -> str:
        if self.fail:
            raise ImageUploadError("storage unavailable")
        ref = f"images/{len(self.images) + 1}"
        self.images[ref] = data
        return ref


@pytest.fixture
def session_repository() -> InMemoryScanSessionRepository:
    return InMemoryScanSessionRepository()


@pytest.fixture
def recipe_repository() -> InMemoryScannedRecipeRepository:
    return InMemoryScannedRecipeRepository()


@pytest.fixture
def cookbook_repository() -> InMemoryPhysicalCookbookRepository:
    return InMemoryPhysicalCookbookRepository()


@pytest.fixture
def image_storage() -> InMemoryImageStorage:
    return InMemoryImageStorage()
