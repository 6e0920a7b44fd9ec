"""
Scenario tests for ScanSessionController against in-memory collaborators.
"""
import asyncio
import itertools
from collections import deque
from unittest.mock import AsyncMock

import pytest

from cookscan.application.commands.resolve_cookbook import ResolveCookbookHandler
from cookscan.application.commands.save_scanned_recipe import SaveScannedRecipeHandler
from cookscan.application.scanning.controller import ScanSessionController
from cookscan.application.scanning.ports import CookbookNameOutcome, ExtractionOutcome
from cookscan.application.scanning.session_lifecycle import SessionLifecycleManager
from cookscan.domain.entities.extracted_page import ExtractedPageData
from cookscan.domain.entities.physical_cookbook import PhysicalCookbook
from cookscan.domain.exceptions import RepositoryError
from cookscan.domain.services.multi_page_merger import merge_pages
from cookscan.domain.value_objects.captured_image import CapturedImage
from cookscan.domain.value_objects.ingredient import Ingredient
from cookscan.domain.value_objects.scan_error import ScanErrorKind
from cookscan.domain.value_objects.scan_step import ScanStep
from cookscan.domain.value_objects.session_status import SessionStatus

HANG = object()

IMAGE = CapturedImage(data=b"\xff\xd8fake-jpeg")


def _page(title, ingredients, instructions, page_number=None):
    return ExtractedPageData(
        title=title,
        ingredients=tuple(Ingredient(name=name) for name in ingredients),
        instructions=tuple(instructions),
        page_number=page_number,
    )


SOUP = _page("Soup", ("leek", "potato", "stock"), ("Chop", "Simmer"), page_number=12)
STEW = _page("Stew", ("beef", "carrot", "onion"), ("Brown", "Braise"), page_number=30)
LASAGNA_1 = _page("Lasagna", ("pasta", "beef"), ("Boil",), page_number=42)
LASAGNA_2 = _page("", ("cheese",), ("Layer", "Bake"), page_number=43)
LASAGNA_3 = _page("", ("basil",), ("Rest",), page_number=44)


class FakeExtractionClient:
    """Scripted extraction client. Queue outcomes, exceptions or HANG."""

    def __init__(self):
        self.outcomes = deque()
        self.cover_outcome = CookbookNameOutcome.failed("NO_NAME", "No title found")
        self.started = asyncio.Event()
        self.calls = 0

    def queue(self, *items):
        self.outcomes.extend(items)
        return self

    async def extract(self, image):
        self.calls += 1
        self.started.set()
        item = self.outcomes.popleft()
        if item is HANG:
            await asyncio.Event().wait()
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, ExtractedPageData):
            return ExtractionOutcome.ok(item)
        return item

    async def extract_cookbook_name(self, image):
        if isinstance(self.cover_outcome, BaseException):
            raise self.cover_outcome
        return self.cover_outcome


@pytest.fixture
def client():
    return FakeExtractionClient()


@pytest.fixture
def make_controller(session_repository, recipe_repository, cookbook_repository, image_storage, client):
    def factory(**kwargs):
        sessions = itertools.count(1)
        recipes = itertools.count(1)
        cookbooks = itertools.count(1)
        lifecycle = SessionLifecycleManager(
            session_repository, "u1", id_factory=lambda: f"s{next(sessions)}"
        )
        return ScanSessionController(
            user_id="u1",
            extraction_client=client,
            lifecycle=lifecycle,
            image_storage=image_storage,
            save_recipe_handler=SaveScannedRecipeHandler(
                recipe_repository, cookbook_repository, id_factory=lambda: f"r{next(recipes)}"
            ),
            resolve_cookbook_handler=ResolveCookbookHandler(
                cookbook_repository, id_factory=lambda: f"cb{next(cookbooks)}"
            ),
            **kwargs,
        )

    return factory


async def _started(controller, name=""):
    if name:
        controller.set_book_name(name)
    state = await controller.skip_cover()
    assert state.step is ScanStep.SCANNING
    return state


class TestSinglePageFlow:
    """One page, one recipe, finish."""

    @pytest.mark.asyncio
    async def test_scan_one_recipe_and_finish(
        self, make_controller, client, session_repository, recipe_repository, cookbook_repository
    ):
        controller = make_controller()
        client.queue(SOUP)
        await _started(controller, "Jerusalem")

        state = await controller.capture_page(IMAGE)
        assert state.step is ScanStep.REVIEW
        assert state.draft == SOUP
        assert not state.suggest_multi_page

        state = await controller.done_scanning()
        assert state.step is ScanStep.COMPLETE
        assert state.recipe_count == 1
        assert state.session_completed

        session = session_repository.sessions["s1"]
        assert session.status is SessionStatus.COMPLETED
        assert session.scanned_recipe_ids == ("r1",)
        recipe = recipe_repository.recipes["r1"]
        assert recipe.title == "Soup"
        assert recipe.page_reference == "12"
        assert recipe.physical_cookbook_id == "cb1"
        assert recipe.session_id == "s1"
        assert cookbook_repository.cookbooks["cb1"].name == "Jerusalem"

    @pytest.mark.asyncio
    async def test_skip_without_name_uses_default_and_no_cookbook(
        self, make_controller, session_repository, cookbook_repository
    ):
        controller = make_controller()
        state = await _started(controller)
        assert state.book_name == "Untitled Cookbook"
        assert state.cookbook_id is None
        assert session_repository.sessions["s1"].book_name == "Untitled Cookbook"
        assert cookbook_repository.cookbooks == {}

    @pytest.mark.asyncio
    async def test_finish_without_recipes(self, make_controller, session_repository):
        controller = make_controller()
        await _started(controller)
        state = await controller.done_scanning()
        assert state.step is ScanStep.COMPLETE
        assert state.recipe_count == 0
        assert session_repository.sessions["s1"].status is SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_existing_cookbook_is_reused(
        self, make_controller, client, cookbook_repository, recipe_repository, session_repository
    ):
        await cookbook_repository.save(PhysicalCookbook.create("cb-existing", "u1", "Plenty"))
        controller = make_controller(existing_cookbook_id="cb-existing", existing_cookbook_name="Plenty")
        client.queue(SOUP)

        state = await _started(controller)
        assert state.book_name == "Plenty"
        assert session_repository.sessions["s1"].physical_cookbook_id == "cb-existing"

        await controller.capture_page(IMAGE)
        await controller.done_scanning()
        assert recipe_repository.recipes["r1"].physical_cookbook_id == "cb-existing"
        assert list(cookbook_repository.cookbooks) == ["cb-existing"]

    @pytest.mark.asyncio
    async def test_edit_then_save(self, make_controller, client, recipe_repository):
        controller = make_controller()
        client.queue(SOUP)
        await _started(controller)
        await controller.capture_page(IMAGE)

        controller.edit_details()
        assert controller.state.is_editing
        state = await controller.save_edits(SOUP.with_title("Leek Soup"))

        assert state.recipe_count == 1
        assert recipe_repository.recipes["r1"].title == "Leek Soup"
        assert state.current_recipe is None


class TestCoverStep:
    """Cover photo upload and cookbook name reading."""

    @pytest.mark.asyncio
    async def test_cover_name_read_from_photo(
        self, make_controller, client, cookbook_repository, session_repository, image_storage
    ):
        client.cover_outcome = CookbookNameOutcome(success=True, name="Plenty", author="Ottolenghi")
        controller = make_controller()
        controller.set_book_name("typed name")
        controller.start_cover_capture()

        state = await controller.capture_cover(IMAGE)

        assert state.step is ScanStep.SCANNING
        assert state.book_name == "Plenty"
        assert state.cover_ref == "images/1"
        cookbook = cookbook_repository.cookbooks["cb1"]
        assert cookbook.author == "Ottolenghi"
        assert cookbook.cover_image_ref == "images/1"
        assert session_repository.sessions["s1"].cover_image_ref == "images/1"

    @pytest.mark.asyncio
    async def test_cover_name_failure_falls_back_to_typed_name(self, make_controller, client):
        client.cover_outcome = RuntimeError("vision down")
        controller = make_controller()
        controller.set_book_name("Typed Book")
        controller.start_cover_capture()

        state = await controller.capture_cover(IMAGE)

        assert state.step is ScanStep.SCANNING
        assert state.book_name == "Typed Book"
        assert state.error is None

    @pytest.mark.asyncio
    async def test_upload_failure_returns_to_cover(self, make_controller, image_storage, session_repository):
        image_storage.fail = True
        controller = make_controller()
        controller.start_cover_capture()

        state = await controller.capture_cover(IMAGE)

        assert state.step is ScanStep.COVER
        assert state.error.kind is ScanErrorKind.UPLOAD_ERROR
        assert state.session_id is None
        assert session_repository.sessions == {}

        image_storage.fail = False
        controller.retry()
        controller.start_cover_capture()
        state = await controller.capture_cover(IMAGE)
        assert state.step is ScanStep.SCANNING

    @pytest.mark.asyncio
    async def test_session_start_failure_returns_to_cover(self, make_controller, session_repository):
        session_repository.save = AsyncMock(side_effect=RepositoryError("store offline"))
        controller = make_controller()

        state = await controller.skip_cover()

        assert state.step is ScanStep.COVER
        assert state.error.kind is ScanErrorKind.SESSION_ERROR
        assert not state.busy


class TestMultiPageFlow:
    @pytest.mark.asyncio
    async def test_two_pages_are_saved_as_one_recipe(self, make_controller, client, recipe_repository):
        controller = make_controller()
        client.queue(LASAGNA_1, LASAGNA_2)
        await _started(controller)

        state = await controller.capture_page(IMAGE)
        assert state.suggest_multi_page
        controller.continue_recipe()
        state = await controller.capture_page(IMAGE)
        assert state.page_count == 2

        state = await controller.scan_another()

        assert state.step is ScanStep.SCANNING
        assert state.recipe_count == 1
        recipe = recipe_repository.recipes["r1"]
        assert recipe.title == "Lasagna"
        assert [item.name for item in recipe.ingredients] == ["pasta", "beef", "cheese"]
        assert recipe.instructions == ("Boil", "Layer", "Bake")
        assert recipe.page_reference == "pp. 42-43"
        assert state.scanned_recipes[0].ingredient_count == 3

    @pytest.mark.asyncio
    async def test_draft_tracks_pages_captured_so_far(self, make_controller, client, recipe_repository):
        controller = make_controller()
        pages = [LASAGNA_1, LASAGNA_2, LASAGNA_3]
        client.queue(*pages)
        await _started(controller)

        state = await controller.capture_page(IMAGE)
        assert state.draft == merge_pages(pages[:1])
        for count in (2, 3):
            controller.continue_recipe()
            state = await controller.capture_page(IMAGE)
            assert state.step is ScanStep.REVIEW
            assert state.draft == merge_pages(pages[:count])

        await controller.done_scanning()

        recipe = recipe_repository.recipes["r1"]
        assert recipe.instructions == ("Boil", "Layer", "Bake", "Rest")
        assert recipe.page_reference == "pp. 42-44"


class TestFailures:
    """Extraction and persistence failures."""

    @pytest.mark.asyncio
    async def test_extraction_failure_then_retry(self, make_controller, client):
        controller = make_controller()
        client.queue(ExtractionOutcome.failed("NOT_A_RECIPE", "This page does not contain a recipe"), SOUP)
        await _started(controller)

        state = await controller.capture_page(IMAGE)
        assert state.step is ScanStep.SCANNING
        assert state.error.kind is ScanErrorKind.EXTRACTION_FAILED
        assert state.error.message == "This page does not contain a recipe"
        assert state.recipe_count == 0

        controller.retry()
        assert controller.state.error is None
        state = await controller.capture_page(IMAGE)
        assert state.step is ScanStep.REVIEW
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_client_exception_is_processing_error(self, make_controller, client):
        controller = make_controller()
        client.queue(ConnectionError("reset"))
        await _started(controller)

        state = await controller.capture_page(IMAGE)

        assert state.step is ScanStep.SCANNING
        assert state.error.kind is ScanErrorKind.PROCESSING_ERROR
        assert not state.busy

    @pytest.mark.asyncio
    async def test_extraction_timeout(self, make_controller, client):
        controller = make_controller(extraction_timeout=0.05)
        client.queue(HANG)
        await _started(controller)

        state = await controller.capture_page(IMAGE)

        assert state.step is ScanStep.SCANNING
        assert state.error.kind is ScanErrorKind.PROCESSING_ERROR
        assert state.error.message == "AI extraction timed out. Please try again."

    @pytest.mark.asyncio
    async def test_save_failure_keeps_draft_and_session_active(
        self, make_controller, client, recipe_repository, session_repository
    ):
        controller = make_controller()
        client.queue(SOUP)
        await _started(controller)
        await controller.capture_page(IMAGE)
        recipe_repository.fail_next = RepositoryError("disk full")

        state = await controller.done_scanning()

        assert state.step is ScanStep.REVIEW
        assert state.error.kind is ScanErrorKind.SESSION_ERROR
        assert state.current_recipe == SOUP
        assert session_repository.sessions["s1"].status is SessionStatus.ACTIVE

        state = await controller.done_scanning()
        assert state.step is ScanStep.COMPLETE
        assert state.recipe_count == 1

    @pytest.mark.asyncio
    async def test_record_failure_is_a_warning(
        self, make_controller, client, recipe_repository, session_repository
    ):
        controller = make_controller()
        client.queue(SOUP)
        await _started(controller)
        await controller.capture_page(IMAGE)
        session_repository.save = AsyncMock(side_effect=RepositoryError("store offline"))

        state = await controller.scan_another()

        assert state.step is ScanStep.SCANNING
        assert state.recipe_count == 1
        assert state.error.kind is ScanErrorKind.SESSION_ERROR
        assert "r1" in recipe_repository.recipes

    @pytest.mark.asyncio
    async def test_completion_failure_falls_back_to_scanning(self, make_controller, session_repository):
        controller = make_controller()
        await _started(controller)
        session_repository.save = AsyncMock(side_effect=RepositoryError("store offline"))

        state = await controller.done_scanning()

        assert state.step is ScanStep.SCANNING
        assert state.error.kind is ScanErrorKind.SESSION_ERROR
        assert not state.session_completed


class TestSessionEnding:
    """Completion, cancellation and close."""

    @pytest.mark.asyncio
    async def test_close_after_two_saves_cancels_session(
        self, make_controller, client, recipe_repository, session_repository
    ):
        controller = make_controller()
        client.queue(SOUP, STEW)
        await _started(controller)
        for _ in range(2):
            await controller.capture_page(IMAGE)
            await controller.scan_another()

        state = await controller.close()

        assert state.step is ScanStep.CLOSED
        session = session_repository.sessions["s1"]
        assert session.status is SessionStatus.CANCELLED
        assert session.scanned_recipe_ids == ("r1", "r2")
        assert set(recipe_repository.recipes) == {"r1", "r2"}

    @pytest.mark.asyncio
    async def test_finish_twice_is_harmless(self, make_controller, session_repository):
        controller = make_controller()
        await _started(controller)
        await controller.done_scanning()
        completed_at = session_repository.sessions["s1"].completed_at

        state = await controller.done_scanning()

        assert state.step is ScanStep.COMPLETE
        assert session_repository.sessions["s1"].completed_at == completed_at

    @pytest.mark.asyncio
    async def test_scan_more_after_completion(
        self, make_controller, client, session_repository, recipe_repository
    ):
        controller = make_controller()
        client.queue(SOUP, STEW)
        await _started(controller)
        await controller.capture_page(IMAGE)
        await controller.done_scanning()

        state = controller.scan_more()
        assert state.step is ScanStep.SCANNING
        await controller.capture_page(IMAGE)
        state = await controller.done_scanning()

        assert state.step is ScanStep.COMPLETE
        assert state.recipe_count == 2
        assert set(recipe_repository.recipes) == {"r1", "r2"}
        session = session_repository.sessions["s1"]
        assert session.status is SessionStatus.COMPLETED
        assert session.scanned_recipe_ids == ("r1",)

        await controller.close()
        assert session_repository.sessions["s1"].status is SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_close_during_save_still_records_recipe(
        self, make_controller, client, session_repository, recipe_repository
    ):
        controller = make_controller()
        client.queue(SOUP)
        await _started(controller)
        await controller.capture_page(IMAGE)

        entered = asyncio.Event()
        release = asyncio.Event()
        store = recipe_repository.save

        async def slow_save(recipe):
            entered.set()
            await release.wait()
            await store(recipe)

        recipe_repository.save = slow_save
        finishing = asyncio.ensure_future(controller.done_scanning())
        await entered.wait()
        closing = asyncio.ensure_future(controller.close())
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(finishing, closing)

        session = session_repository.sessions["s1"]
        assert session.status is SessionStatus.CANCELLED
        assert session.scanned_recipe_ids == ("r1",)
        assert "r1" in recipe_repository.recipes
        assert controller.state.step is ScanStep.CLOSED

    @pytest.mark.asyncio
    async def test_close_during_extraction_discards_result(
        self, make_controller, client, session_repository
    ):
        controller = make_controller()
        client.queue(HANG)
        await _started(controller)

        capture = asyncio.ensure_future(controller.capture_page(IMAGE))
        await client.started.wait()
        assert controller.state.step is ScanStep.PROCESSING

        await controller.close()
        state = await capture

        assert state.step is ScanStep.CLOSED
        assert state.current_recipe is None
        assert session_repository.sessions["s1"].status is SessionStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_actions_after_close_are_ignored(self, make_controller, client):
        controller = make_controller()
        await _started(controller)
        await controller.close()

        state = await controller.capture_page(IMAGE)

        assert state.step is ScanStep.CLOSED
        assert client.calls == 0
        assert (await controller.close()) is state

    @pytest.mark.asyncio
    async def test_close_before_session_start(self, make_controller, session_repository):
        controller = make_controller()
        state = await controller.close()
        assert state.step is ScanStep.CLOSED
        assert session_repository.sessions == {}
