"""Shared FastAPI dependencies and wiring for the scan workflow.

These factories centralize construction of repositories, handlers and the
scan controller so routers (and any other entry point) depend on simple
callables.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from cookscan.application.commands.resolve_cookbook import ResolveCookbookHandler
from cookscan.application.commands.save_scanned_recipe import SaveScannedRecipeHandler
from cookscan.application.queries.get_scan_session import GetScanSessionHandler
from cookscan.application.queries.list_scan_sessions import ListScanSessionsHandler
from cookscan.application.scanning.controller import ScanSessionController
from cookscan.application.scanning.ports import RecipeExtractionClient
from cookscan.application.scanning.session_lifecycle import SessionLifecycleManager
from cookscan.config import get_settings
from cookscan.domain.repositories.image_storage import ImageStorage
from cookscan.domain.repositories.physical_cookbook_repository import PhysicalCookbookRepository
from cookscan.domain.repositories.scan_session_repository import ScanSessionRepository
from cookscan.domain.repositories.scanned_recipe_repository import ScannedRecipeRepository
from cookscan.infrastructure.images.file_image_storage import FileImageStorage
from cookscan.infrastructure.persistence.file_physical_cookbook_repository import (
    FilePhysicalCookbookRepository,
)
from cookscan.infrastructure.persistence.file_scan_session_repository import (
    FileScanSessionRepository,
)
from cookscan.infrastructure.persistence.file_scanned_recipe_repository import (
    FileScannedRecipeRepository,
)
from cookscan.infrastructure.vision.azure_recipe_extraction_client import (
    AzureRecipeExtractionClient,
)


@lru_cache()
def _scan_session_repository() -> ScanSessionRepository:
    return FileScanSessionRepository(get_settings().data_dir())


def get_scan_session_repository() -> ScanSessionRepository:
    """Provide a singleton scan session repository instance."""
    return _scan_session_repository()


@lru_cache()
def _scanned_recipe_repository() -> ScannedRecipeRepository:
    return FileScannedRecipeRepository(get_settings().data_dir())


def get_scanned_recipe_repository() -> ScannedRecipeRepository:
    """Provide a singleton recipe repository instance."""
    return _scanned_recipe_repository()


@lru_cache()
def _physical_cookbook_repository() -> PhysicalCookbookRepository:
    return FilePhysicalCookbookRepository(get_settings().data_dir())


@lru_cache()
def _image_storage() -> ImageStorage:
    return FileImageStorage(get_settings().data_dir())


@lru_cache()
def _extraction_client() -> RecipeExtractionClient:
    return AzureRecipeExtractionClient(settings=get_settings())


@lru_cache()
def _get_scan_session_handler() -> GetScanSessionHandler:
    return GetScanSessionHandler(_scan_session_repository(), _scanned_recipe_repository())


def get_scan_session_handler() -> GetScanSessionHandler:
    """Provide a cached GetScanSession handler."""
    return _get_scan_session_handler()


@lru_cache()
def _list_scan_sessions_handler() -> ListScanSessionsHandler:
    return ListScanSessionsHandler(_scan_session_repository())


def get_list_scan_sessions_handler() -> ListScanSessionsHandler:
    """Provide a cached ListScanSessions handler."""
    return _list_scan_sessions_handler()


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity from the ``X-User-Id`` header."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


def build_scan_controller(
    user_id: str,
    *,
    extraction_client: Optional[RecipeExtractionClient] = None,
    existing_cookbook_id: Optional[str] = None,
    existing_cookbook_name: Optional[str] = None,
) -> ScanSessionController:
    """Wire a controller for one scan workflow run of ``user_id``."""
    settings = get_settings()
    return ScanSessionController(
        user_id=user_id,
        extraction_client=extraction_client or _extraction_client(),
        lifecycle=SessionLifecycleManager(_scan_session_repository(), user_id),
        image_storage=_image_storage(),
        save_recipe_handler=SaveScannedRecipeHandler(
            _scanned_recipe_repository(), _physical_cookbook_repository()
        ),
        resolve_cookbook_handler=ResolveCookbookHandler(_physical_cookbook_repository()),
        extraction_timeout=settings.extraction_timeout_seconds,
        cover_name_timeout=settings.cover_name_timeout_seconds,
        existing_cookbook_id=existing_cookbook_id,
        existing_cookbook_name=existing_cookbook_name,
    )
