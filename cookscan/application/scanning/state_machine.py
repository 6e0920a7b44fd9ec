"""
Pure state machine for the cookbook scan workflow.

``transition(state, event)`` is total: every (state, event) pair yields a
state. Events a state does not accept return the *same* state object, so
callers detect an ignored event with ``new is old``. No I/O happens here;
the controller performs side effects and feeds their results back in as
events.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple, Type

from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.entities.page_accumulator import PageAccumulator
from cookscan.domain.entities.scanned_recipe import ScannedRecipePreview
from cookscan.domain.services.multi_page_merger import (
    MultiPageMerger,
    format_page_range,
    is_recipe_incomplete,
)
from cookscan.domain.value_objects.scan_error import ScanError
from cookscan.domain.value_objects.scan_step import ScanStep

_merger = MultiPageMerger()


@dataclass(frozen=True)
class ScanState:
    """Snapshot of the whole workflow."""

    step: ScanStep = ScanStep.COVER
    session_id: Optional[str] = None
    book_name: str = ""
    cookbook_id: Optional[str] = None
    cover_ref: Optional[str] = None
    is_cover_capture: bool = False
    is_editing: bool = False
    is_multi_page: bool = False
    busy: bool = False
    pending_ticket: Optional[int] = None
    last_ticket: int = 0
    pending_slot: Optional[int] = None
    current_recipe: Optional[ExtractedPageData] = None
    current_slot: Optional[int] = None
    accumulator: PageAccumulator = field(default_factory=PageAccumulator)
    scanned_recipes: Tuple[ScannedRecipePreview, ...] = ()
    error: Optional[ScanError] = None
    session_completed: bool = False

    @property
    def draft(self) -> Optional[ExtractedPageData]:
        """Recipe that would be saved now: merged pages in multi-page mode."""
        if self.current_recipe is None:
            return None
        if self.is_multi_page and self.accumulator:
            return _merger.merge(self.accumulator.pages())
        return self.current_recipe

    @property
    def page_reference(self) -> str:
        """Formatted page range of the draft, e.g. ``"pp. 42-43"``."""
        if self.is_multi_page and self.accumulator:
            labels = [page.page_label for page in _merger.reading_order(self.accumulator.pages())]
        elif self.current_recipe is not None:
            labels = [self.current_recipe.page_label]
        else:
            labels = []
        return format_page_range(labels)

    @property
    def suggest_multi_page(self) -> bool:
        """True when a single-page result looks like it continues on another page."""
        return (
            self.step is ScanStep.REVIEW
            and not self.is_multi_page
            and self.current_recipe is not None
            and is_recipe_incomplete(self.current_recipe)
        )

    @property
    def recipe_count(self) -> int:
        return len(self.scanned_recipes)

    @property
    def page_count(self) -> int:
        return len(self.accumulator) if self.is_multi_page else int(self.current_recipe is not None)


# Events ---------------------------------------------------------------------


@dataclass(frozen=True)
class BookNameChanged:
    name: str


@dataclass(frozen=True)
class CoverCaptureStarted:
    pass


@dataclass(frozen=True)
class CoverCaptureAborted:
    pass


@dataclass(frozen=True)
class CoverSubmitted:
    pass


@dataclass(frozen=True)
class CoverSkipped:
    pass


@dataclass(frozen=True)
class SessionStarted:
    session_id: str
    book_name: str
    cookbook_id: Optional[str] = None
    cover_ref: Optional[str] = None


@dataclass(frozen=True)
class PageCaptured:
    pass


@dataclass(frozen=True)
class ExtractionSucceeded:
    ticket: int
    page: ExtractedPageData


@dataclass(frozen=True)
class ExtractionDiscarded:
    """The in-flight extraction was abandoned without a result."""
    ticket: int


@dataclass(frozen=True)
class StepFailed:
    """A side effect failed. ``ticket`` is set for extraction failures."""
    error: ScanError
    ticket: Optional[int] = None


@dataclass(frozen=True)
class ContinueRecipe:
    pass


@dataclass(frozen=True)
class RecipeSaveStarted:
    pass


@dataclass(frozen=True)
class RecipeSaved:
    preview: ScannedRecipePreview
    warning: Optional[ScanError] = None


@dataclass(frozen=True)
class ScanAnother:
    pass


@dataclass(frozen=True)
class FinishRequested:
    pass


@dataclass(frozen=True)
class SessionCompleted:
    pass


@dataclass(frozen=True)
class ScanMore:
    pass


@dataclass(frozen=True)
class EditStarted:
    pass


@dataclass(frozen=True)
class EditCancelled:
    pass


@dataclass(frozen=True)
class RecipeEdited:
    page: ExtractedPageData


@dataclass(frozen=True)
class ErrorDismissed:
    pass


@dataclass(frozen=True)
class Closed:
    pass


# Transition helpers ---------------------------------------------------------


def _reset_draft(state: ScanState, **changes) -> ScanState:
    return replace(
        state,
        current_recipe=None,
        current_slot=None,
        pending_slot=None,
        accumulator=state.accumulator.cleared(),
        is_multi_page=False,
        is_editing=False,
        **changes,
    )


def _on_book_name_changed(state: ScanState, event: BookNameChanged) -> ScanState:
    if state.step is not ScanStep.COVER or state.busy:
        return state
    return replace(state, book_name=event.name)


def _on_cover_capture_started(state: ScanState, event: CoverCaptureStarted) -> ScanState:
    if state.step is not ScanStep.COVER or state.busy or state.is_cover_capture:
        return state
    return replace(state, is_cover_capture=True, error=None)


def _on_cover_capture_aborted(state: ScanState, event: CoverCaptureAborted) -> ScanState:
    if state.step is not ScanStep.COVER or state.busy or not state.is_cover_capture:
        return state
    return replace(state, is_cover_capture=False)


def _on_cover_started(state: ScanState, event) -> ScanState:
    if state.step is not ScanStep.COVER or state.busy:
        return state
    return replace(state, busy=True, error=None)


def _on_session_started(state: ScanState, event: SessionStarted) -> ScanState:
    if state.step is not ScanStep.COVER or not state.busy:
        return state
    return replace(
        state,
        step=ScanStep.SCANNING,
        busy=False,
        is_cover_capture=False,
        session_id=event.session_id,
        book_name=event.book_name,
        cookbook_id=event.cookbook_id or state.cookbook_id,
        cover_ref=event.cover_ref or state.cover_ref,
        error=None,
    )


def _on_page_captured(state: ScanState, event: PageCaptured) -> ScanState:
    if state.step is not ScanStep.SCANNING or state.busy or state.is_editing:
        return state
    ticket = state.last_ticket + 1
    return replace(
        state,
        step=ScanStep.PROCESSING,
        busy=True,
        pending_ticket=ticket,
        last_ticket=ticket,
        pending_slot=state.accumulator.next_slot if state.is_multi_page else None,
        error=None,
    )


def _accepts_ticket(state: ScanState, ticket: Optional[int]) -> bool:
    return (
        state.step is ScanStep.PROCESSING
        and state.pending_ticket is not None
        and ticket == state.pending_ticket
    )


def _on_extraction_succeeded(state: ScanState, event: ExtractionSucceeded) -> ScanState:
    if not _accepts_ticket(state, event.ticket):
        return state
    accumulator = state.accumulator
    slot = None
    if state.is_multi_page:
        slot = state.pending_slot or accumulator.next_slot
        accumulator = accumulator.with_page(slot, event.page)
    return replace(
        state,
        step=ScanStep.REVIEW,
        busy=False,
        pending_ticket=None,
        pending_slot=None,
        current_recipe=event.page,
        current_slot=slot,
        accumulator=accumulator,
        error=None,
    )


def _on_extraction_discarded(state: ScanState, event: ExtractionDiscarded) -> ScanState:
    if not _accepts_ticket(state, event.ticket):
        return state
    return replace(
        state,
        step=ScanStep.SCANNING,
        busy=False,
        pending_ticket=None,
        pending_slot=None,
    )


def _on_step_failed(state: ScanState, event: StepFailed) -> ScanState:
    if event.ticket is not None:
        if not _accepts_ticket(state, event.ticket):
            return state
    elif not state.busy or state.step is ScanStep.PROCESSING:
        return state
    return replace(
        state,
        step=event.error.recovery_step,
        busy=False,
        pending_ticket=None,
        pending_slot=None,
        is_cover_capture=False,
        error=event.error,
    )


def _on_continue_recipe(state: ScanState, event: ContinueRecipe) -> ScanState:
    if (
        state.step is not ScanStep.REVIEW
        or state.busy
        or state.is_editing
        or state.current_recipe is None
    ):
        return state
    if state.is_multi_page:
        return replace(state, step=ScanStep.SCANNING, error=None)
    return replace(
        state,
        step=ScanStep.SCANNING,
        is_multi_page=True,
        accumulator=PageAccumulator().with_page(1, state.current_recipe),
        current_slot=1,
        error=None,
    )


def _on_recipe_save_started(state: ScanState, event: RecipeSaveStarted) -> ScanState:
    if (
        state.step not in (ScanStep.REVIEW, ScanStep.SCANNING)
        or state.busy
        or state.current_recipe is None
    ):
        return state
    return replace(state, busy=True)


def _on_recipe_saved(state: ScanState, event: RecipeSaved) -> ScanState:
    if not state.busy or state.step not in (ScanStep.REVIEW, ScanStep.SCANNING):
        return state
    return _reset_draft(
        state,
        busy=False,
        scanned_recipes=state.scanned_recipes + (event.preview,),
        error=event.warning,
    )


def _on_scan_another(state: ScanState, event: ScanAnother) -> ScanState:
    if state.step is not ScanStep.REVIEW or state.busy or state.is_editing:
        return state
    return _reset_draft(state, step=ScanStep.SCANNING)


def _on_finish_requested(state: ScanState, event: FinishRequested) -> ScanState:
    if state.step not in (ScanStep.REVIEW, ScanStep.SCANNING) or state.busy or state.is_editing:
        return state
    return replace(state, busy=True)


def _on_session_completed(state: ScanState, event: SessionCompleted) -> ScanState:
    if not state.busy or state.step not in (ScanStep.REVIEW, ScanStep.SCANNING):
        return state
    return _reset_draft(
        state,
        step=ScanStep.COMPLETE,
        busy=False,
        session_completed=True,
    )


def _on_scan_more(state: ScanState, event: ScanMore) -> ScanState:
    if state.step is not ScanStep.COMPLETE or state.busy:
        return state
    return _reset_draft(state, step=ScanStep.SCANNING, error=None)


def _on_edit_started(state: ScanState, event: EditStarted) -> ScanState:
    if (
        state.step is not ScanStep.REVIEW
        or state.busy
        or state.is_editing
        or state.current_recipe is None
    ):
        return state
    return replace(state, is_editing=True)


def _on_edit_cancelled(state: ScanState, event: EditCancelled) -> ScanState:
    if state.step is not ScanStep.REVIEW or state.busy or not state.is_editing:
        return state
    return replace(state, is_editing=False)


def _on_recipe_edited(state: ScanState, event: RecipeEdited) -> ScanState:
    if state.step is not ScanStep.REVIEW or state.busy or not state.is_editing:
        return state
    accumulator = state.accumulator
    if state.is_multi_page and state.current_slot is not None:
        accumulator = accumulator.with_page(state.current_slot, event.page)
    return replace(
        state,
        current_recipe=event.page,
        accumulator=accumulator,
        is_editing=False,
        error=None,
    )


def _on_error_dismissed(state: ScanState, event: ErrorDismissed) -> ScanState:
    if state.error is None:
        return state
    return replace(state, error=None)


def _on_closed(state: ScanState, event: Closed) -> ScanState:
    return replace(
        state,
        step=ScanStep.CLOSED,
        busy=False,
        pending_ticket=None,
        pending_slot=None,
        is_cover_capture=False,
        is_editing=False,
    )


_HANDLERS: Dict[Type, Callable[[ScanState, object], ScanState]] = {
    BookNameChanged: _on_book_name_changed,
    CoverCaptureStarted: _on_cover_capture_started,
    CoverCaptureAborted: _on_cover_capture_aborted,
    CoverSubmitted: _on_cover_started,
    CoverSkipped: _on_cover_started,
    SessionStarted: _on_session_started,
    PageCaptured: _on_page_captured,
    ExtractionSucceeded: _on_extraction_succeeded,
    ExtractionDiscarded: _on_extraction_discarded,
    StepFailed: _on_step_failed,
    ContinueRecipe: _on_continue_recipe,
    RecipeSaveStarted: _on_recipe_save_started,
    RecipeSaved: _on_recipe_saved,
    ScanAnother: _on_scan_another,
    FinishRequested: _on_finish_requested,
    SessionCompleted: _on_session_completed,
    ScanMore: _on_scan_more,
    EditStarted: _on_edit_started,
    EditCancelled: _on_edit_cancelled,
    RecipeEdited: _on_recipe_edited,
    ErrorDismissed: _on_error_dismissed,
    Closed: _on_closed,
}


def transition(state: ScanState, event: object) -> ScanState:
    """Return the state after ``event``; the same object when the event is ignored."""
    if state.step is ScanStep.CLOSED:
        return state
    handler = _HANDLERS.get(type(event))
    if handler is None:
        return state
    return handler(state, event)


def accepts(state: ScanState, event: object) -> bool:
    """True when ``event`` would change ``state``."""
    return transition(state, event) is not state


def replay(events: List[object], state: Optional[ScanState] = None) -> ScanState:
    """Fold events over a state, starting from the initial state by default."""
    current = state or ScanState()
    for event in events:
        current = transition(current, event)
    return current
