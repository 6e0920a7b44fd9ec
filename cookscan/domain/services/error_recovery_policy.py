"""
ErrorRecoveryPolicy domain service.

Maps a failure at a given stage of the scan workflow to a user-facing
ScanError and the step the workflow falls back to.
"""
import asyncio
from enum import Enum
from typing import Optional

from cookscan.constants import TIMEOUT_MESSAGE
from cookscan.domain.value_objects.scan_error import ScanError, ScanErrorKind
from cookscan.domain.value_objects.scan_step import ScanStep


class FailureStage(str, Enum):
    """Points in the workflow where a collaborator can fail."""
    COVER_UPLOAD = "cover_upload"
    SESSION_START = "session_start"
    EXTRACTION_CALL = "extraction_call"
    EXTRACTION_RESULT = "extraction_result"
    RECIPE_SAVE = "recipe_save"
    SESSION_RECORD = "session_record"
    SESSION_COMPLETION = "session_completion"


_TIMEOUT_TYPES = (asyncio.TimeoutError, TimeoutError)


class ErrorRecoveryPolicy:
    """
    Domain service that classifies workflow failures.

    Every error is retryable by repeating the triggering action. None is
    retried automatically and none ends the workflow.
    """

    _RULES = {
        FailureStage.COVER_UPLOAD: (
            ScanErrorKind.UPLOAD_ERROR,
            ScanStep.COVER,
            "Failed to process cover photo. Please try again.",
        ),
        FailureStage.SESSION_START: (
            ScanErrorKind.SESSION_ERROR,
            ScanStep.COVER,
            "Failed to start scanning session.",
        ),
        FailureStage.EXTRACTION_CALL: (
            ScanErrorKind.PROCESSING_ERROR,
            ScanStep.SCANNING,
            "Failed to process recipe page. Please try again.",
        ),
        FailureStage.EXTRACTION_RESULT: (
            ScanErrorKind.EXTRACTION_FAILED,
            ScanStep.SCANNING,
            "Failed to extract recipe from image.",
        ),
        FailureStage.RECIPE_SAVE: (
            ScanErrorKind.SESSION_ERROR,
            ScanStep.REVIEW,
            "Failed to save recipe. Please try again.",
        ),
        FailureStage.SESSION_RECORD: (
            ScanErrorKind.SESSION_ERROR,
            ScanStep.REVIEW,
            "Recipe saved, but it could not be added to this session.",
        ),
        FailureStage.SESSION_COMPLETION: (
            ScanErrorKind.SESSION_ERROR,
            ScanStep.SCANNING,
            "Failed to complete scanning session.",
        ),
    }

    def classify(
        self,
        stage: FailureStage,
        exc: Optional[BaseException] = None,
        *,
        error_type: Optional[str] = None,
        message: Optional[str] = None,
        fallback_step: Optional[ScanStep] = None,
    ) -> ScanError:
        """
        Convert a failure into a ScanError.

        Args:
            stage: Where the failure happened
            exc: Exception raised by the collaborator, if any
            error_type: Error type reported by the extraction service
            message: Message reported by the extraction service
            fallback_step: Overrides the stage's default recovery step
                (a recipe save returns to the step it was requested from)

        Returns:
            ScanError with kind, message and recovery step
        """
        kind, step, default_message = self._RULES[stage]
        final_message = default_message
        detail = error_type

        if stage is FailureStage.EXTRACTION_CALL and self.is_timeout(exc):
            final_message = TIMEOUT_MESSAGE
            detail = "TIMEOUT"
        elif stage is FailureStage.EXTRACTION_RESULT and message:
            final_message = message
        elif exc is not None and detail is None:
            detail = type(exc).__name__

        return ScanError(
            kind=kind,
            message=final_message,
            recovery_step=fallback_step or step,
            detail=detail,
        )

    def is_timeout(self, exc: Optional[BaseException]) -> bool:
        return isinstance(exc, _TIMEOUT_TYPES)
