"""
MultiPageMerger domain service.

Combines the per-page data extracted from a recipe that spans several
photographed pages into one recipe, and holds the related page helpers
(page range formatting and the "looks incomplete" heuristic).

Everything here is pure: no I/O, no exceptions for well-formed input.
"""
from typing import Iterable, List, Optional, Sequence, Union

from cookscan.constants import MIN_COMPLETE_INGREDIENTS, MIN_COMPLETE_INSTRUCTIONS
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.value_objects.ingredient import Ingredient


PageNumber = Union[int, str, None]


class MultiPageMerger:
    """
    Domain service that merges pages into a single recipe.

    Merge rules:
    - Title: first non-empty title in reading order
    - Ingredients and instructions: concatenated in reading order, no dedup
    - Servings, prep time, cook time: first value greater than zero, else 0
    - Page number: number of the last page merged that carries one
    - Page label: printed label of the last page merged that carries one

    Reading order is page-number order when every page carries a number,
    otherwise the order the pages were captured in.
    """

    @staticmethod
    def reading_order(pages: Sequence[ExtractedPageData]) -> List[ExtractedPageData]:
        """Return pages in the order they should be read."""
        ordered = list(pages)
        if ordered and all(page.page_number is not None for page in ordered):
            # sorted() is stable, so duplicate numbers keep capture order
            ordered = sorted(ordered, key=lambda page: page.page_number)
        return ordered

    def merge(self, pages: Iterable[ExtractedPageData]) -> ExtractedPageData:
        """
        Merge pages into one recipe.

        Args:
            pages: Pages in capture order

        Returns:
            Merged page data; the empty recipe shape when ``pages`` is empty
        """
        ordered = self.reading_order(list(pages))
        if not ordered:
            return ExtractedPageData.empty()

        title = next((page.title for page in ordered if page.title), "")

        ingredients: List[Ingredient] = []
        instructions: List[str] = []
        for page in ordered:
            ingredients.extend(page.ingredients)
            instructions.extend(page.instructions)

        page_number: Optional[int] = None
        page_label = ""
        for page in ordered:
            if page.page_number is not None:
                page_number = page.page_number
            if page.page_label:
                page_label = page.page_label

        return ExtractedPageData(
            title=title,
            ingredients=tuple(ingredients),
            instructions=tuple(instructions),
            servings=_first_positive(page.servings for page in ordered),
            prep_time=_first_positive(page.prep_time for page in ordered),
            cook_time=_first_positive(page.cook_time for page in ordered),
            page_number=page_number,
            page_label=page_label,
        )


def _first_positive(values: Iterable[int]) -> int:
    for value in values:
        if value and value > 0:
            return value
    return 0


_DEFAULT_MERGER = MultiPageMerger()


def merge_pages(pages: Iterable[ExtractedPageData]) -> ExtractedPageData:
    """Merge pages with the default merger."""
    return _DEFAULT_MERGER.merge(pages)


def format_page_range(page_numbers: Iterable[PageNumber]) -> str:
    """
    Format page numbers as a printed reference.

    Examples:
        >>> format_page_range([42])
        '42'
        >>> format_page_range([43, 42, 44])
        'pp. 42-44'
        >>> format_page_range([42, 45, 47])
        'pp. 42, 45, 47'
        >>> format_page_range([None])
        ''
    """
    valid = [str(number).strip() for number in page_numbers if number is not None and str(number).strip()]
    if not valid:
        return ""
    if len(valid) == 1:
        return valid[0]

    numeric = []
    for text in valid:
        try:
            numeric.append(int(text))
        except ValueError:
            continue
    numeric.sort()

    if len(numeric) >= 2:
        consecutive = all(numeric[i] == numeric[i - 1] + 1 for i in range(1, len(numeric)))
        if consecutive:
            return f"pp. {numeric[0]}-{numeric[-1]}"
        return "pp. " + ", ".join(str(number) for number in numeric)

    return "pp. " + ", ".join(valid)


def is_recipe_incomplete(page: ExtractedPageData) -> bool:
    """
    Heuristic: does this single-page extraction look like it continues elsewhere?

    True when the page has ingredients but no instructions (or the reverse),
    very few ingredients, or a single instruction step.
    """
    ingredient_count = len(page.ingredients)
    instruction_count = len(page.instructions)

    if ingredient_count and not instruction_count:
        return True
    if instruction_count and not ingredient_count:
        return True
    if 0 < ingredient_count < MIN_COMPLETE_INGREDIENTS:
        return True
    if 0 < instruction_count < MIN_COMPLETE_INSTRUCTIONS:
        return True
    return False
