"""ListScanSessions Query - The user's recent scan sessions, newest first."""
from dataclasses import dataclass
from typing import List, Optional

from cookscan.application.dto.scan_session_dto import ScanSessionSummaryDTO
from cookscan.domain.repositories.scan_session_repository import ScanSessionRepository
from cookscan.domain.value_objects.session_status import SessionStatus

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class ListScanSessionsQuery:
    user_id: str
    limit: int = DEFAULT_LIMIT
    status: Optional[SessionStatus] = None

    def __post_init__(self):
        if self.limit < 1:
            raise ValueError("limit must be at least 1")


class ListScanSessionsHandler:
    """Handles ListScanSessions queries."""

    def __init__(self, session_repository: ScanSessionRepository):
        self._sessions = session_repository

    async def handle(self, query: ListScanSessionsQuery) -> List[ScanSessionSummaryDTO]:
        sessions = await self._sessions.find_by_user(
            query.user_id,
            status=query.status,
            limit=min(query.limit, MAX_LIMIT),
        )
        return [ScanSessionSummaryDTO.from_session(session) for session in sessions]
