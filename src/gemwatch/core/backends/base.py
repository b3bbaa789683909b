"""
Backend error hierarchy.

Every browser-level failure raised by GemWatch derives from BackendError so
the runner can translate it into a single user-facing ScrapeError.
"""

from __future__ import annotations


class BackendError(Exception):
    """Base exception for backend errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.cause = cause


class BrowserError(BackendError):
    """Browser could not be launched or an action failed."""
    pass


class NavigationTimeout(BrowserError):
    """Page didn't load in time."""
    pass


class ElementNotFound(BrowserError):
    """A required control could not be located."""
    pass
