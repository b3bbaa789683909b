"""Browser session and backend errors."""

from .base import (
    BackendError,
    BrowserError,
    ElementNotFound,
    NavigationTimeout,
)
from .playwright_backend import PlaywrightBackend

__all__ = [
    # Errors
    "BackendError",
    "BrowserError",
    "ElementNotFound",
    "NavigationTimeout",
    # Session
    "PlaywrightBackend",
]
