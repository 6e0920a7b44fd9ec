"""File-based implementation of ScanSessionRepository."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from cookscan.domain.entities.scan_session import ScanSession
from cookscan.domain.exceptions import RepositoryError
from cookscan.domain.repositories.scan_session_repository import ScanSessionRepository
from cookscan.domain.value_objects.session_status import SessionStatus
from cookscan.infrastructure.persistence.snapshot_store import JsonSnapshotStore

logger = logging.getLogger(__name__)


class FileScanSessionRepository(ScanSessionRepository):
    """Persist scan sessions as JSON snapshots on disk."""

    def __init__(self, base_dir: str | Path = "scan_data") -> None:
        self._store = JsonSnapshotStore(base_dir, "sessions")

    async def save(self, session: ScanSession) -> None:
        await asyncio.to_thread(self._store.write, session.session_id, session.to_dict())

    async def find_by_id(self, session_id: str) -> Optional[ScanSession]:
        data = await asyncio.to_thread(self._store.read, session_id)
        if data is None:
            return None
        return self._hydrate(session_id, data)

    async def find_by_user(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None,
    ) -> List[ScanSession]:
        return await asyncio.to_thread(self._find_by_user, user_id, status, limit)

    def _find_by_user(
        self,
        user_id: str,
        status: Optional[SessionStatus],
        limit: Optional[int],
    ) -> List[ScanSession]:
        sessions: List[ScanSession] = []
        for session_id, data in self._store.read_all():
            if data.get("user_id") != user_id:
                continue
            try:
                session = self._hydrate(session_id, data)
            except RepositoryError as exc:
                logger.warning("Skipping session %s due to snapshot error: %s", session_id, exc)
                continue
            if status is not None and session.status is not status:
                continue
            sessions.append(session)

        sessions.sort(key=lambda session: session.created_at, reverse=True)
        return sessions if limit is None else sessions[:limit]

    def _hydrate(self, session_id: str, data: dict) -> ScanSession:
        try:
            return ScanSession.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Failed to hydrate scan session {session_id}", exc)
