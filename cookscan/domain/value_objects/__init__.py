"""
Domain Value Objects

Immutable value objects that encapsulate domain concepts with validation.
"""
from .captured_image import CapturedImage
from .ingredient import Ingredient, IngredientCategory
from .scan_error import ScanError, ScanErrorKind
from .scan_step import ScanStep
from .session_status import SessionStatus

__all__ = [
    'CapturedImage',
    'Ingredient',
    'IngredientCategory',
    'ScanError',
    'ScanErrorKind',
    'ScanStep',
    'SessionStatus',
]
