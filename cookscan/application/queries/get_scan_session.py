"""
GetScanSession Query - A session with previews of the recipes saved in it.

Also serves the "active session" lookup used to resume scanning.
"""
from dataclasses import dataclass
from typing import Optional

from cookscan.application.dto.scan_session_dto import ScanSessionDetailDTO
from cookscan.domain.entities.scan_session import ScanSession
from cookscan.domain.exceptions import EntityNotFoundError
from cookscan.domain.repositories.scan_session_repository import ScanSessionRepository
from cookscan.domain.repositories.scanned_recipe_repository import ScannedRecipeRepository
from cookscan.domain.value_objects.session_status import SessionStatus


@dataclass(frozen=True)
class GetScanSessionQuery:
    user_id: str
    session_id: str


@dataclass(frozen=True)
class GetActiveScanSessionQuery:
    user_id: str


class GetScanSessionHandler:
    """Handles GetScanSession and GetActiveScanSession queries."""

    def __init__(
        self,
        session_repository: ScanSessionRepository,
        recipe_repository: ScannedRecipeRepository,
    ):
        self._sessions = session_repository
        self._recipes = recipe_repository

    async def handle(self, query: GetScanSessionQuery) -> ScanSessionDetailDTO:
        """
        Return the session with recipe previews.

        Raises:
            EntityNotFoundError: If the session does not exist for this user
        """
        session = await self._sessions.find_by_id(query.session_id)
        if session is None or session.user_id != query.user_id:
            raise EntityNotFoundError(
                "ScanSession",
                query.session_id,
                message=f"Scan session with ID '{query.session_id}' not found",
            )
        return await self._to_detail(session)

    async def handle_active(self, query: GetActiveScanSessionQuery) -> Optional[ScanSessionDetailDTO]:
        """Return the user's active session, or None."""
        sessions = await self._sessions.find_by_user(query.user_id, status=SessionStatus.ACTIVE, limit=1)
        if not sessions:
            return None
        return await self._to_detail(sessions[0])

    async def _to_detail(self, session: ScanSession) -> ScanSessionDetailDTO:
        recipes = await self._recipes.find_by_ids(list(session.scanned_recipe_ids))
        return ScanSessionDetailDTO.from_session(session, [recipe.to_preview() for recipe in recipes])
