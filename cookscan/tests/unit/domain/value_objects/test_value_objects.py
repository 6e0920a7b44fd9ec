"""
Unit tests for SessionStatus, CapturedImage and ScanStep value objects.
"""
import base64

import pytest

from cookscan.domain.value_objects.captured_image import CapturedImage
from cookscan.domain.value_objects.scan_step import ScanStep
from cookscan.domain.value_objects.session_status import SessionStatus


class TestSessionStatus:
    def test_from_string_is_case_insensitive(self):
        assert SessionStatus.from_string(" Active ") is SessionStatus.ACTIVE

    def test_from_string_rejects_unknown(self):
        with pytest.raises(ValueError):
            SessionStatus.from_string("paused")

    @pytest.mark.parametrize(
        "current, target, allowed",
        [
            (SessionStatus.ACTIVE, SessionStatus.COMPLETED, True),
            (SessionStatus.ACTIVE, SessionStatus.CANCELLED, True),
            (SessionStatus.COMPLETED, SessionStatus.CANCELLED, False),
            (SessionStatus.CANCELLED, SessionStatus.COMPLETED, False),
            (SessionStatus.COMPLETED, SessionStatus.ACTIVE, False),
        ],
    )
    def test_transitions(self, current, target, allowed):
        assert current.can_transition_to(target) is allowed

    def test_terminal_states(self):
        assert not SessionStatus.ACTIVE.is_terminal()
        assert SessionStatus.COMPLETED.is_terminal()
        assert SessionStatus.CANCELLED.is_terminal()


class TestCapturedImage:
    def test_rejects_empty_data(self):
        with pytest.raises(ValueError):
            CapturedImage(data=b"")

    def test_rejects_non_image_mime(self):
        with pytest.raises(ValueError):
            CapturedImage(data=b"abc", mime_type="application/pdf")

    def test_from_base64_with_data_url(self):
        encoded = base64.b64encode(b"\x89PNG").decode()
        image = CapturedImage.from_base64(f"data:image/png;base64,{encoded}")
        assert image.mime_type == "image/png"
        assert image.data == b"\x89PNG"
        assert image.to_base64() == encoded

    def test_from_base64_rejects_garbage(self):
        with pytest.raises(ValueError):
            CapturedImage.from_base64("not base64!!")


class TestScanStep:
    def test_interactive_steps(self):
        assert ScanStep.REVIEW.is_interactive()
        assert not ScanStep.PROCESSING.is_interactive()
        assert ScanStep.CLOSED.is_terminal()
