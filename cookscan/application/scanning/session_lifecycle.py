"""
SessionLifecycleManager - creates, updates, completes and cancels scan sessions.

One manager serves one workflow run: it starts at most one session and then
only operates on sessions owned by its user.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from cookscan.domain.entities.scan_session import ScanSession
from cookscan.domain.exceptions import EntityNotFoundError, EntityValidationError
from cookscan.domain.repositories.scan_session_repository import ScanSessionRepository
from cookscan.domain.value_objects.session_status import SessionStatus

logger = logging.getLogger(__name__)


def _new_session_id() -> str:
    return uuid.uuid4().hex


class SessionLifecycleManager:
    """Owns the persisted status of a scan session."""

    def __init__(
        self,
        repository: ScanSessionRepository,
        user_id: str,
        id_factory: Callable[[], str] = _new_session_id,
    ):
        self._sessions = repository
        self._user_id = user_id
        self._id_factory = id_factory
        self._started_session_id: Optional[str] = None

    @property
    def session_id(self) -> Optional[str]:
        return self._started_session_id

    async def start(
        self,
        book_name: str,
        cookbook_id: Optional[str] = None,
        cover_ref: Optional[str] = None,
    ) -> str:
        """
        Create a new active session and return its id.

        Any other active session of the same user is cancelled first, so a
        user has at most one active session.

        Raises:
            EntityValidationError: If this manager already started a session
            RepositoryError: If persistence fails
        """
        if self._started_session_id is not None:
            raise EntityValidationError(
                "ScanSession",
                {"session_id": f"session {self._started_session_id} already started"},
            )

        for stale in await self._sessions.find_by_user(self._user_id, status=SessionStatus.ACTIVE):
            await self._sessions.save(stale.mark_cancelled())
            logger.info(
                "Cancelled stale active session",
                extra={"session_id": stale.session_id, "user_id": self._user_id},
            )

        session = ScanSession.create(
            session_id=self._id_factory(),
            user_id=self._user_id,
            book_name=book_name,
            physical_cookbook_id=cookbook_id,
            cover_image_ref=cover_ref,
        )
        await self._sessions.save(session)
        self._started_session_id = session.session_id
        logger.info(
            "Scan session started",
            extra={"session_id": session.session_id, "user_id": self._user_id, "book_name": book_name},
        )
        return session.session_id

    async def _load_owned(self, session_id: str) -> ScanSession:
        session = await self._sessions.find_by_id(session_id)
        if session is None or session.user_id != self._user_id:
            raise EntityNotFoundError("ScanSession", session_id)
        return session

    async def update(
        self,
        session_id: str,
        book_name: Optional[str] = None,
        cookbook_id: Optional[str] = None,
        cover_ref: Optional[str] = None,
    ) -> ScanSession:
        """
        Change book details of an active session.

        Raises:
            EntityNotFoundError: If the session does not exist for this user
            EntityValidationError: If the session is no longer active
        """
        session = await self._load_owned(session_id)
        if not session.is_active():
            raise EntityValidationError(
                "ScanSession", {"status": f"cannot update a {session.status.value} session"}
            )
        updated = session.with_details(
            book_name=book_name,
            physical_cookbook_id=cookbook_id,
            cover_image_ref=cover_ref,
        )
        await self._sessions.save(updated)
        return updated

    async def record_recipe(self, session_id: str, recipe_id: str) -> ScanSession:
        """
        Append a saved recipe to the session.

        Recording the same recipe twice leaves one entry. On a session that is
        no longer active this is a no-op.
        """
        session = await self._load_owned(session_id)
        if not session.is_active():
            logger.info(
                "Recipe not recorded on inactive session",
                extra={"session_id": session_id, "recipe_id": recipe_id, "status": session.status.value},
            )
            return session
        updated = session.record_recipe(recipe_id)
        if updated is session:
            return session
        await self._sessions.save(updated)
        logger.debug("Recipe recorded", extra={"session_id": session_id, "recipe_id": recipe_id})
        return updated

    async def complete(self, session_id: str) -> ScanSession:
        """
        Mark the session completed. Completing twice is a no-op.

        Raises:
            InvalidSessionTransitionError: If the session was cancelled
        """
        session = await self._load_owned(session_id)
        if session.status is SessionStatus.COMPLETED:
            return session
        completed = session.mark_completed()
        await self._sessions.save(completed)
        logger.info(
            "Scan session completed",
            extra={"session_id": session_id, "recipe_count": completed.recipe_count},
        )
        return completed

    async def cancel(self, session_id: str) -> ScanSession:
        """
        Mark the session cancelled, keeping every recipe already saved.

        Cancelling twice is a no-op.

        Raises:
            InvalidSessionTransitionError: If the session was completed
        """
        session = await self._load_owned(session_id)
        if session.status is SessionStatus.CANCELLED:
            return session
        cancelled = session.mark_cancelled()
        await self._sessions.save(cancelled)
        logger.info(
            "Scan session cancelled",
            extra={"session_id": session_id, "recipe_count": cancelled.recipe_count},
        )
        return cancelled
