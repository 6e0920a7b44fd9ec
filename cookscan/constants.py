from __future__ import annotations

# Single source of truth for static constants and versions.

SNAPSHOT_VERSION = 1

# Name used when a session starts without a cover or typed book name.
DEFAULT_BOOK_NAME = "Untitled Cookbook"

# Title applied to a saved recipe whose pages carried no readable title.
UNTITLED_RECIPE_TITLE = "Untitled Recipe"

RECIPE_SOURCE_SCANNED = "scanned"

# Below these counts a single-page extraction likely continues on another page.
MIN_COMPLETE_INGREDIENTS = 3
MIN_COMPLETE_INSTRUCTIONS = 2

TIMEOUT_MESSAGE = "AI extraction timed out. Please try again."
