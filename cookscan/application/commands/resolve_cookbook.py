"""ResolveCookbook Command - Finds or creates the user's physical cookbook by name."""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from cookscan.domain.entities.physical_cookbook import PhysicalCookbook
from cookscan.domain.exceptions import EntityValidationError
from cookscan.domain.repositories.physical_cookbook_repository import PhysicalCookbookRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveCookbookCommand:
    user_id: str
    name: str
    author: Optional[str] = None
    cover_image_ref: Optional[str] = None


class ResolveCookbookHandler:
    """Handles ResolveCookbook commands (get-or-create with back-fill)."""

    def __init__(
        self,
        cookbook_repository: PhysicalCookbookRepository,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._cookbooks = cookbook_repository
        self._id_factory = id_factory

    async def handle(self, command: ResolveCookbookCommand) -> PhysicalCookbook:
        """
        Return the cookbook named ``command.name``, creating it when missing.

        An existing cookbook without author or cover gets the supplied ones.

        Raises:
            EntityValidationError: If the name is blank
        """
        name = (command.name or "").strip()
        if not name:
            raise EntityValidationError("PhysicalCookbook", {"name": "must not be blank"})

        existing = await self._cookbooks.find_by_name(command.user_id, name)
        if existing is not None:
            updated = existing.with_backfill(
                author=command.author,
                cover_image_ref=command.cover_image_ref,
            )
            if updated is not existing:
                await self._cookbooks.save(updated)
                logger.info("Cookbook details back-filled", extra={"cookbook_id": existing.cookbook_id})
            return updated

        cookbook = PhysicalCookbook.create(
            cookbook_id=self._id_factory(),
            user_id=command.user_id,
            name=name,
            author=command.author,
            cover_image_ref=command.cover_image_ref,
        )
        await self._cookbooks.save(cookbook)
        logger.info("Cookbook created", extra={"cookbook_id": cookbook.cookbook_id, "cookbook_name": name})
        return cookbook
