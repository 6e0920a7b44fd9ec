"""API v1 routers package."""

from . import scan_sessions

__all__ = [
    "scan_sessions",
]
