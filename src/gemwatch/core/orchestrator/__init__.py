"""Orchestrator - acquisition run coordination."""

from .runner import (
    RunStats,
    ScrapeError,
    ScrapeRunner,
    read_store,
    run_acquisition,
    validate_page_limit,
)

__all__ = [
    "RunStats",
    "ScrapeError",
    "ScrapeRunner",
    "read_store",
    "run_acquisition",
    "validate_page_limit",
]
