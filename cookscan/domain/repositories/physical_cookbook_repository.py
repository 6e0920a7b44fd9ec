"""Physical cookbook repository interface (Abstract Base Class)."""

from abc import ABC, abstractmethod
from typing import Optional

from cookscan.domain.entities.physical_cookbook import PhysicalCookbook


class PhysicalCookbookRepository(ABC):
    """Abstract repository for a user's printed cookbooks."""

    @abstractmethod
    async def save(self, cookbook: PhysicalCookbook) -> None:
        """Persist the cookbook."""

    @abstractmethod
    async def find_by_id(self, cookbook_id: str) -> Optional[PhysicalCookbook]:
        """Return the cookbook with the provided identifier, if it exists."""

    @abstractmethod
    async def find_by_name(self, user_id: str, name: str) -> Optional[PhysicalCookbook]:
        """Return the user's cookbook with a case-insensitively matching name."""
