"""PhysicalCookbook Entity - A printed book owned by a user."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PhysicalCookbook:
    """Immutable cookbook record, resolved by name when a scan session starts."""

    cookbook_id: str
    user_id: str
    name: str
    author: Optional[str] = None
    cover_image_ref: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        cookbook_id: str,
        user_id: str,
        name: str,
        author: Optional[str] = None,
        cover_image_ref: Optional[str] = None,
    ) -> PhysicalCookbook:
        return cls(
            cookbook_id=cookbook_id,
            user_id=user_id,
            name=name.strip(),
            author=author or None,
            cover_image_ref=cover_image_ref or None,
            created_at=datetime.now(),
        )

    def with_backfill(
        self,
        author: Optional[str] = None,
        cover_image_ref: Optional[str] = None,
    ) -> PhysicalCookbook:
        """
        Fill in author and cover when this record lacks them.

        Existing values are never overwritten. Returns self when nothing changes.
        """
        new_author = self.author or author or None
        new_cover = self.cover_image_ref or cover_image_ref or None
        if new_author == self.author and new_cover == self.cover_image_ref:
            return self
        return PhysicalCookbook(
            cookbook_id=self.cookbook_id,
            user_id=self.user_id,
            name=self.name,
            author=new_author,
            cover_image_ref=new_cover,
            created_at=self.created_at,
        )

    def matches_name(self, name: str) -> bool:
        return self.name.strip().casefold() == (name or "").strip().casefold()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PhysicalCookbook:
        created_at = data.get("created_at")
        return cls(
            cookbook_id=data["cookbook_id"],
            user_id=data["user_id"],
            name=data.get("name") or "",
            author=data.get("author"),
            cover_image_ref=data.get("cover_image_ref"),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cookbook_id": self.cookbook_id,
            "user_id": self.user_id,
            "name": self.name,
            "author": self.author,
            "cover_image_ref": self.cover_image_ref,
            "created_at": self.created_at.isoformat(),
        }
