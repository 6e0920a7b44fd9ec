"""
ScanSession Entity - A run of scanning one physical cookbook.

The session is the aggregate that groups every recipe saved while a user
photographs a single book. It is immutable; every change produces a new
instance.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from cookscan.domain.exceptions import InvalidSessionTransitionError
from cookscan.domain.value_objects.session_status import SessionStatus


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class ScanSession:
    """
    Scan session aggregate root.

    Holds the book being scanned, an optional link to the physical cookbook
    record and cover image, and the ordered ids of recipes saved during the
    session.
    """

    session_id: str
    user_id: str
    book_name: str
    status: SessionStatus = SessionStatus.ACTIVE
    cover_image_ref: Optional[str] = None
    physical_cookbook_id: Optional[str] = None
    scanned_recipe_ids: Tuple[str, ...] = field(default_factory=tuple)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, 'scanned_recipe_ids', tuple(self.scanned_recipe_ids or ()))

    @classmethod
    def create(
        cls,
        session_id: str,
        user_id: str,
        book_name: str,
        physical_cookbook_id: Optional[str] = None,
        cover_image_ref: Optional[str] = None,
    ) -> ScanSession:
        """Create a new active session with no recipes."""
        now = datetime.now()
        return cls(
            session_id=session_id,
            user_id=user_id,
            book_name=book_name,
            status=SessionStatus.ACTIVE,
            cover_image_ref=cover_image_ref,
            physical_cookbook_id=physical_cookbook_id,
            scanned_recipe_ids=(),
            created_at=now,
            updated_at=now,
            completed_at=None,
        )

    def _copy(self, **changes: Any) -> ScanSession:
        values = {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "book_name": self.book_name,
            "status": self.status,
            "cover_image_ref": self.cover_image_ref,
            "physical_cookbook_id": self.physical_cookbook_id,
            "scanned_recipe_ids": self.scanned_recipe_ids,
            "created_at": self.created_at,
            "updated_at": datetime.now(),
            "completed_at": self.completed_at,
        }
        values.update(changes)
        return ScanSession(**values)

    def with_details(
        self,
        book_name: Optional[str] = None,
        physical_cookbook_id: Optional[str] = None,
        cover_image_ref: Optional[str] = None,
    ) -> ScanSession:
        """Return session with any supplied details replaced."""
        return self._copy(
            book_name=book_name if book_name is not None else self.book_name,
            physical_cookbook_id=(
                physical_cookbook_id if physical_cookbook_id is not None else self.physical_cookbook_id
            ),
            cover_image_ref=cover_image_ref if cover_image_ref is not None else self.cover_image_ref,
        )

    def has_recipe(self, recipe_id: str) -> bool:
        return recipe_id in self.scanned_recipe_ids

    def record_recipe(self, recipe_id: str) -> ScanSession:
        """Return session with ``recipe_id`` appended; returns self when already recorded."""
        if self.has_recipe(recipe_id):
            return self
        return self._copy(scanned_recipe_ids=self.scanned_recipe_ids + (recipe_id,))

    def _with_terminal_status(self, status: SessionStatus) -> ScanSession:
        if not self.status.can_transition_to(status):
            raise InvalidSessionTransitionError(self.session_id, self.status.value, status.value)
        now = datetime.now()
        return self._copy(status=status, updated_at=now, completed_at=now)

    def mark_completed(self) -> ScanSession:
        """Return session marked as completed."""
        return self._with_terminal_status(SessionStatus.COMPLETED)

    def mark_cancelled(self) -> ScanSession:
        """Return session marked as cancelled. Saved recipes are kept."""
        return self._with_terminal_status(SessionStatus.CANCELLED)

    def is_active(self) -> bool:
        return self.status.is_active()

    @property
    def recipe_count(self) -> int:
        return len(self.scanned_recipe_ids)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScanSession:
        """Create ScanSession from a stored snapshot."""
        return cls(
            session_id=data["session_id"],
            user_id=data["user_id"],
            book_name=data.get("book_name") or "",
            status=SessionStatus.from_string(data.get("status", SessionStatus.ACTIVE.value)),
            cover_image_ref=data.get("cover_image_ref"),
            physical_cookbook_id=data.get("physical_cookbook_id"),
            scanned_recipe_ids=tuple(data.get("scanned_recipe_ids") or ()),
            created_at=_parse_timestamp(data.get("created_at")) or datetime.now(),
            updated_at=_parse_timestamp(data.get("updated_at")) or datetime.now(),
            completed_at=_parse_timestamp(data.get("completed_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly snapshot."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "book_name": self.book_name,
            "status": self.status.value,
            "cover_image_ref": self.cover_image_ref,
            "physical_cookbook_id": self.physical_cookbook_id,
            "scanned_recipe_ids": list(self.scanned_recipe_ids),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
