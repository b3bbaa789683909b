"""CLI command modules."""

from . import scrape, tenders

__all__ = [
    "scrape",
    "tenders",
]
