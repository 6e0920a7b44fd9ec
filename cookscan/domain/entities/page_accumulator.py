"""
PageAccumulator Entity - Ordered collection of pages belonging to one recipe.

Pages are keyed by the capture slot reserved when the photo was taken, so a
result that arrives late still lands in the position it was captured in.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional

from cookscan.domain.entities.extracted_page import ExtractedPageData


@dataclass(frozen=True)
class PageAccumulator:
    """Immutable slot -> page arena. Use the ``with_*`` methods to derive new versions."""

    entries: Mapping[int, ExtractedPageData] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))

    @property
    def next_slot(self) -> int:
        """Slot number the next captured page should reserve."""
        return max(self.entries, default=0) + 1

    def with_page(self, slot: int, page: ExtractedPageData) -> PageAccumulator:
        """Return accumulator with ``page`` stored in ``slot`` (replacing any previous entry)."""
        if slot < 1:
            raise ValueError(f"Capture slot must be positive, got {slot}")
        updated = dict(self.entries)
        updated[slot] = page
        return PageAccumulator(entries=updated)

    def get(self, slot: int) -> Optional[ExtractedPageData]:
        return self.entries.get(slot)

    def pages(self) -> List[ExtractedPageData]:
        """Pages in capture-slot order."""
        return [self.entries[slot] for slot in sorted(self.entries)]

    def cleared(self) -> PageAccumulator:
        return PageAccumulator()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ExtractedPageData]:
        return iter(self.pages())

    def __bool__(self) -> bool:
        return bool(self.entries)
