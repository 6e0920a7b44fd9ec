"""
ScanSessionController - drives the scan workflow.

Each user action feeds an event to the pure state machine, performs the
side effects the new state calls for (upload, extraction, persistence) and
feeds their results back in. Collaborator failures never escape a user
action; they become a ScanError on the state.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

from cookscan.application.commands.resolve_cookbook import (
    ResolveCookbookCommand,
    ResolveCookbookHandler,
)
from cookscan.application.commands.save_scanned_recipe import (
    SaveScannedRecipeCommand,
    SaveScannedRecipeHandler,
)
from cookscan.application.scanning.ports import RecipeExtractionClient
from cookscan.application.scanning.session_lifecycle import SessionLifecycleManager
from cookscan.application.scanning.state_machine import (
    BookNameChanged,
    Closed,
    ContinueRecipe,
    CoverCaptureAborted,
    CoverCaptureStarted,
    CoverSkipped,
    CoverSubmitted,
    EditCancelled,
    EditStarted,
    ErrorDismissed,
    ExtractionDiscarded,
    ExtractionSucceeded,
    FinishRequested,
    PageCaptured,
    RecipeEdited,
    RecipeSaved,
    RecipeSaveStarted,
    ScanAnother,
    ScanMore,
    ScanState,
    SessionCompleted,
    SessionStarted,
    StepFailed,
    accepts,
    transition,
)
from cookscan.constants import DEFAULT_BOOK_NAME
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.repositories.image_storage import ImageStorage
from cookscan.domain.services.error_recovery_policy import ErrorRecoveryPolicy, FailureStage
from cookscan.domain.value_objects.captured_image import CapturedImage
from cookscan.domain.value_objects.scan_step import ScanStep

logger = logging.getLogger(__name__)


class ScanSessionController:
    """Async workflow driver around ``transition``."""

    def __init__(
        self,
        *,
        user_id: str,
        extraction_client: RecipeExtractionClient,
        lifecycle: SessionLifecycleManager,
        image_storage: ImageStorage,
        save_recipe_handler: SaveScannedRecipeHandler,
        resolve_cookbook_handler: ResolveCookbookHandler,
        extraction_timeout: float = 60.0,
        cover_name_timeout: float = 30.0,
        policy: Optional[ErrorRecoveryPolicy] = None,
        existing_cookbook_id: Optional[str] = None,
        existing_cookbook_name: Optional[str] = None,
    ):
        self._user_id = user_id
        self._client = extraction_client
        self._lifecycle = lifecycle
        self._images = image_storage
        self._save_recipe = save_recipe_handler
        self._resolve_cookbook = resolve_cookbook_handler
        self._extraction_timeout = extraction_timeout
        self._cover_name_timeout = cover_name_timeout
        self._policy = policy or ErrorRecoveryPolicy()
        self._inflight: Optional[asyncio.Task] = None
        self._save_done: Optional[asyncio.Event] = None
        self._state = ScanState(
            book_name=existing_cookbook_name or "",
            cookbook_id=existing_cookbook_id,
        )

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state.step is ScanStep.CLOSED

    def _apply(self, event: object) -> bool:
        previous = self._state
        current = transition(previous, event)
        if current is previous:
            logger.debug(
                "Scan event ignored",
                extra={"event": type(event).__name__, "step": previous.step.value},
            )
            return False
        self._state = current
        logger.debug(
            "Scan transition",
            extra={
                "event": type(event).__name__,
                "from_step": previous.step.value,
                "step": current.step.value,
                "session_id": current.session_id,
            },
        )
        return True

    def _fail(
        self,
        stage: FailureStage,
        exc: Optional[BaseException] = None,
        *,
        ticket: Optional[int] = None,
        fallback_step: Optional[ScanStep] = None,
    ) -> ScanState:
        error = self._policy.classify(stage, exc, fallback_step=fallback_step)
        logger.warning(
            "Scan step failed",
            exc_info=exc,
            extra={
                "stage": stage.value,
                "kind": error.kind.value,
                "session_id": self._state.session_id,
            },
        )
        self._apply(StepFailed(error, ticket=ticket))
        return self._state

    # Cover step ----------------------------------------------------------

    def set_book_name(self, name: str) -> ScanState:
        self._apply(BookNameChanged(name))
        return self._state

    def start_cover_capture(self) -> ScanState:
        self._apply(CoverCaptureStarted())
        return self._state

    def abort_cover_capture(self) -> ScanState:
        self._apply(CoverCaptureAborted())
        return self._state

    async def capture_cover(self, image: CapturedImage) -> ScanState:
        """Upload the cover, read the book name from it and start the session."""
        if not self._apply(CoverSubmitted()):
            return self._state

        try:
            cover_ref = await self._images.upload_image(image.data, image.mime_type)
        except Exception as exc:
            return self._fail(FailureStage.COVER_UPLOAD, exc)
        if self.is_closed:
            return self._state

        name, author = await self._read_cover_name(image)
        if self.is_closed:
            return self._state

        book_name = name or self._state.book_name.strip() or DEFAULT_BOOK_NAME
        return await self._start_session(
            book_name,
            resolve=True,
            author=author,
            cover_ref=cover_ref,
        )

    async def skip_cover(self) -> ScanState:
        """Start the session without a cover photo."""
        if not self._apply(CoverSkipped()):
            return self._state
        typed_name = self._state.book_name.strip()
        return await self._start_session(
            typed_name or DEFAULT_BOOK_NAME,
            resolve=bool(typed_name) and self._state.cookbook_id is None,
        )

    async def _read_cover_name(self, image: CapturedImage) -> Tuple[Optional[str], Optional[str]]:
        try:
            outcome = await asyncio.wait_for(
                self._client.extract_cookbook_name(image),
                timeout=self._cover_name_timeout,
            )
        except Exception:
            # The name is optional; the typed or default name is used instead.
            logger.warning("Cookbook name extraction failed", exc_info=True)
            return None, None
        if outcome.success and outcome.name and outcome.name.strip():
            return outcome.name.strip(), outcome.author
        logger.info(
            "Cookbook name not read from cover",
            extra={"error_type": outcome.error_type},
        )
        return None, None

    async def _start_session(
        self,
        book_name: str,
        *,
        resolve: bool,
        author: Optional[str] = None,
        cover_ref: Optional[str] = None,
    ) -> ScanState:
        cookbook_id = self._state.cookbook_id
        try:
            if resolve:
                cookbook = await self._resolve_cookbook.handle(
                    ResolveCookbookCommand(
                        user_id=self._user_id,
                        name=book_name,
                        author=author,
                        cover_image_ref=cover_ref,
                    )
                )
                cookbook_id = cookbook.cookbook_id
            session_id = await self._lifecycle.start(book_name, cookbook_id, cover_ref)
        except Exception as exc:
            return self._fail(FailureStage.SESSION_START, exc)

        if self.is_closed:
            # Closed while starting: the session must not stay active.
            await self._cancel_session(session_id)
            return self._state

        self._apply(
            SessionStarted(
                session_id=session_id,
                book_name=book_name,
                cookbook_id=cookbook_id,
                cover_ref=cover_ref,
            )
        )
        return self._state

    # Page capture --------------------------------------------------------

    async def capture_page(self, image: CapturedImage) -> ScanState:
        """Extract a recipe page; the state moves to review or back to scanning."""
        if not self._apply(PageCaptured()):
            return self._state
        ticket = self._state.pending_ticket

        task = asyncio.ensure_future(
            asyncio.wait_for(self._client.extract(image), timeout=self._extraction_timeout)
        )
        self._inflight = task
        try:
            outcome = await task
        except asyncio.CancelledError:
            if self.is_closed:
                return self._state
            self._apply(ExtractionDiscarded(ticket))
            raise
        except Exception as exc:
            return self._fail(FailureStage.EXTRACTION_CALL, exc, ticket=ticket)
        finally:
            if self._inflight is task:
                self._inflight = None

        if not outcome.success or outcome.page is None:
            error = self._policy.classify(
                FailureStage.EXTRACTION_RESULT,
                error_type=outcome.error_type,
                message=outcome.message,
            )
            logger.info(
                "Recipe extraction returned no recipe",
                extra={"error_type": outcome.error_type, "session_id": self._state.session_id},
            )
            self._apply(StepFailed(error, ticket=ticket))
            return self._state

        self._apply(ExtractionSucceeded(ticket=ticket, page=outcome.page))
        return self._state

    # Review --------------------------------------------------------------

    def continue_recipe(self) -> ScanState:
        """Treat the next captured page as a continuation of this recipe."""
        self._apply(ContinueRecipe())
        return self._state

    def edit_details(self) -> ScanState:
        self._apply(EditStarted())
        return self._state

    def cancel_edit(self) -> ScanState:
        self._apply(EditCancelled())
        return self._state

    async def save_edits(self, page: ExtractedPageData) -> ScanState:
        """Replace the current page with the edited one and save the recipe."""
        if not self._apply(RecipeEdited(page)):
            return self._state
        await self._save_current()
        return self._state

    async def scan_another(self) -> ScanState:
        """Save the current recipe (if any) and start scanning a new one."""
        if not accepts(self._state, ScanAnother()):
            return self._state
        self._apply(ErrorDismissed())
        if self._state.current_recipe is not None and not await self._save_current():
            return self._state
        self._apply(ScanAnother())
        return self._state

    async def done_scanning(self) -> ScanState:
        """Save the current recipe (if any) and complete the session."""
        if not accepts(self._state, FinishRequested()):
            return self._state
        self._apply(ErrorDismissed())
        if self._state.current_recipe is not None and not await self._save_current():
            return self._state
        if not self._apply(FinishRequested()):
            return self._state

        session_id = self._state.session_id
        try:
            if session_id:
                await self._lifecycle.complete(session_id)
        except Exception as exc:
            return self._fail(FailureStage.SESSION_COMPLETION, exc)
        self._apply(SessionCompleted())
        return self._state

    def scan_more(self) -> ScanState:
        """Keep scanning the same book after completing."""
        self._apply(ScanMore())
        return self._state

    def retry(self) -> ScanState:
        """Clear the current error so the failed action can be repeated."""
        self._apply(ErrorDismissed())
        return self._state

    dismiss_error = retry

    async def _save_current(self) -> bool:
        """Save the draft recipe. Returns True when the workflow can move on."""
        before = self._state
        draft = before.draft
        origin = before.step
        if draft is None or not self._apply(RecipeSaveStarted()):
            return False

        command = SaveScannedRecipeCommand(
            user_id=self._user_id,
            page=draft,
            physical_cookbook_id=before.cookbook_id,
            page_reference=before.page_reference or None,
            session_id=before.session_id,
        )
        save_done = asyncio.Event()
        self._save_done = save_done
        try:
            try:
                recipe = await self._save_recipe.handle(command)
            except Exception as exc:
                self._fail(FailureStage.RECIPE_SAVE, exc, fallback_step=origin)
                return False

            warning = None
            if before.session_id:
                try:
                    await self._lifecycle.record_recipe(before.session_id, recipe.recipe_id)
                except Exception as exc:
                    warning = self._policy.classify(FailureStage.SESSION_RECORD, exc, fallback_step=origin)
                    logger.warning(
                        "Saved recipe could not be recorded in session",
                        exc_info=exc,
                        extra={"session_id": before.session_id, "recipe_id": recipe.recipe_id},
                    )
        finally:
            save_done.set()

        return self._apply(RecipeSaved(preview=recipe.to_preview(), warning=warning))

    # Teardown ------------------------------------------------------------

    async def close(self) -> ScanState:
        """
        End the workflow.

        Discards any in-flight extraction and cancels the session unless it
        was completed. A recipe save already in flight finishes and is
        recorded in the session before it is cancelled. Recipes already
        saved are kept.
        """
        if self.is_closed:
            return self._state
        session_id = self._state.session_id
        completed = self._state.session_completed
        self._apply(Closed())

        task = self._inflight
        if task is not None and not task.done():
            task.cancel()

        save_done = self._save_done
        if save_done is not None and not save_done.is_set():
            await save_done.wait()

        if session_id and not completed:
            await self._cancel_session(session_id)
        return self._state

    async def _cancel_session(self, session_id: str) -> None:
        try:
            await self._lifecycle.cancel(session_id)
        except Exception:
            logger.warning(
                "Failed to cancel scan session",
                exc_info=True,
                extra={"session_id": session_id},
            )
