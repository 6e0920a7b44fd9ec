"""
SessionStatus value object

Represents the lifecycle status of a cookbook scan session.
Enforces valid state transitions.
"""
from __future__ import annotations

from enum import Enum


class SessionStatus(str, Enum):
    """Valid scan session states."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_string(cls, value: str) -> SessionStatus:
        """
        Create SessionStatus from a stored string.

        Args:
            value: Status as string (case-insensitive)

        Returns:
            SessionStatus instance

        Raises:
            ValueError: If the value is not a known status

        Examples:
            >>> SessionStatus.from_string("Completed")
            <SessionStatus.COMPLETED: 'completed'>
        """
        return cls(str(value).strip().lower())

    def can_transition_to(self, new_status: SessionStatus) -> bool:
        """
        Check if transition to new status is valid.

        Valid transitions:
        - ACTIVE → COMPLETED, CANCELLED
        - COMPLETED → (none - terminal state)
        - CANCELLED → (none - terminal state)
        """
        valid_transitions = {
            SessionStatus.ACTIVE: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
            SessionStatus.COMPLETED: set(),
            SessionStatus.CANCELLED: set(),
        }
        return new_status in valid_transitions.get(self, set())

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions allowed)."""
        return self in {SessionStatus.COMPLETED, SessionStatus.CANCELLED}

    def is_active(self) -> bool:
        return self is SessionStatus.ACTIVE
