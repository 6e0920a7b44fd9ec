"""Scan session repository interface (Abstract Base Class)."""

from abc import ABC, abstractmethod
from typing import List, Optional

from cookscan.domain.entities.scan_session import ScanSession
from cookscan.domain.value_objects.session_status import SessionStatus


class ScanSessionRepository(ABC):
    """Abstract repository for ScanSession aggregates."""

    @abstractmethod
    async def save(self, session: ScanSession) -> None:
        """Persist the given session, replacing any previous snapshot."""

    @abstractmethod
    async def find_by_id(self, session_id: str) -> Optional[ScanSession]:
        """Return the session with the provided identifier, if it exists."""

    @abstractmethod
    async def find_by_user(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None,
    ) -> List[ScanSession]:
        """Return the user's sessions, newest first, optionally filtered by status."""
