"""File-based implementation of PhysicalCookbookRepository."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from cookscan.domain.entities.physical_cookbook import PhysicalCookbook
from cookscan.domain.exceptions import RepositoryError
from cookscan.domain.repositories.physical_cookbook_repository import PhysicalCookbookRepository
from cookscan.infrastructure.persistence.snapshot_store import JsonSnapshotStore

logger = logging.getLogger(__name__)


class FilePhysicalCookbookRepository(PhysicalCookbookRepository):
    """Persist physical cookbooks as JSON snapshots on disk."""

    def __init__(self, base_dir: str | Path = "scan_data") -> None:
        self._store = JsonSnapshotStore(base_dir, "cookbooks")

    async def save(self, cookbook: PhysicalCookbook) -> None:
        await asyncio.to_thread(self._store.write, cookbook.cookbook_id, cookbook.to_dict())

    async def find_by_id(self, cookbook_id: str) -> Optional[PhysicalCookbook]:
        data = await asyncio.to_thread(self._store.read, cookbook_id)
        if data is None:
            return None
        return self._hydrate(cookbook_id, data)

    async def find_by_name(self, user_id: str, name: str) -> Optional[PhysicalCookbook]:
        return await asyncio.to_thread(self._find_by_name, user_id, name)

    def _find_by_name(self, user_id: str, name: str) -> Optional[PhysicalCookbook]:
        for cookbook_id, data in self._store.read_all():
            if data.get("user_id") != user_id:
                continue
            try:
                cookbook = self._hydrate(cookbook_id, data)
            except RepositoryError as exc:
                logger.warning("Skipping cookbook %s due to snapshot error: %s", cookbook_id, exc)
                continue
            if cookbook.matches_name(name):
                return cookbook
        return None

    def _hydrate(self, cookbook_id: str, data: dict) -> PhysicalCookbook:
        try:
            return PhysicalCookbook.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Failed to hydrate cookbook {cookbook_id}", exc)
