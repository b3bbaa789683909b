"""
Acquisition runner.

Coordinates one full pass: open browser -> load listing -> [keyword filter]
-> page through cards -> persist the store. The store is only written
after a completed pass; a failed run leaves it untouched.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from gemwatch.core.backends.base import BackendError
from gemwatch.core.backends.playwright_backend import PlaywrightBackend
from gemwatch.core.config.models import AppConfig
from gemwatch.core.logging import get_contextual_logger
from gemwatch.core.portals.gem_listing import GemListingPortal, ListingOutcome
from gemwatch.core.portals.locator import ControlLocator
from gemwatch.core.portals.view import PlaywrightListingView
from gemwatch.persistence.models import TenderRecord
from gemwatch.persistence.store import TenderStore

logger = logging.getLogger(__name__)

MIN_PAGE_LIMIT = 1
MAX_PAGE_LIMIT = 50

TIMEOUT_CAUSE = "timeout"


class ScrapeError(Exception):
    """An acquisition run failed; the store was not modified."""

    def __init__(self, message: str, cause: str | None = None):
        super().__init__(message)
        self.cause = cause or message


@dataclass
class RunStats:
    """Statistics for an acquisition run."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    keyword: str = ""
    page_limit: int = 0

    pages_parsed: int = 0
    cards_seen: int = 0
    cards_failed: int = 0
    duplicates: int = 0
    records_found: int = 0
    stored_count: int = 0
    stop_reason: str | None = None

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def absorb(self, outcome: ListingOutcome) -> None:
        """Copy counters from a finished listing pass."""
        self.pages_parsed = outcome.pages_parsed
        self.cards_seen = outcome.cards_seen
        self.cards_failed = outcome.cards_failed
        self.duplicates = outcome.duplicates
        self.records_found = len(outcome.records)
        self.stop_reason = outcome.stop_reason.value if outcome.stop_reason else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "keyword": self.keyword,
            "page_limit": self.page_limit,
            "pages_parsed": self.pages_parsed,
            "cards_seen": self.cards_seen,
            "cards_failed": self.cards_failed,
            "duplicates": self.duplicates,
            "records_found": self.records_found,
            "stored_count": self.stored_count,
            "stop_reason": self.stop_reason,
            "duration_seconds": self.duration_seconds,
        }


def validate_page_limit(page_limit: int, maximum: int = MAX_PAGE_LIMIT) -> int:
    if not MIN_PAGE_LIMIT <= page_limit <= maximum:
        raise ValueError(f"page_limit must be between {MIN_PAGE_LIMIT} and {maximum}, got {page_limit}")
    return page_limit


class ScrapeRunner:
    """Runs one acquisition against the listing site.

    Each run gets its own browser session and seen-key set. Runs that
    target the same store must be serialized by the caller.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        store: TenderStore | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.store = store or TenderStore(self.config.storage.store_path)
        self.backend: PlaywrightBackend | None = None

    def _create_backend(self) -> PlaywrightBackend:
        return PlaywrightBackend.from_config(self.config.browser)

    async def _open_portal(self, backend: PlaywrightBackend) -> GemListingPortal:
        """Load the listing page and wire the driver to it."""
        site = self.config.site
        timing = self.config.timing

        page = await backend.open(site.listing_url)

        view = PlaywrightListingView(page, site, timeout_ms=timing.wait_timeout_ms)
        locator = ControlLocator(
            view,
            navbar_input_id=site.navbar_input_id,
            next_selectors=site.next_link_selectors,
            timeout_ms=timing.wait_timeout_ms,
            poll_interval_ms=timing.poll_interval_ms,
            settle_ms=timing.settle_ms,
            type_delay_ms=timing.type_delay_ms,
        )
        return GemListingPortal(
            view,
            locator,
            base_url=site.base_url,
            timeout_ms=timing.wait_timeout_ms,
        )

    async def run(self, page_limit: int, keyword: str = "") -> RunStats:
        """Execute a complete acquisition run.

        Args:
            page_limit: Maximum listing pages to parse (1..50)
            keyword: Optional listing search keyword

        Returns:
            RunStats with execution statistics

        Raises:
            ValueError: If page_limit is out of range
            ScrapeError: If the run fails for any reason
        """
        validate_page_limit(page_limit, self.config.max_page_limit)
        keyword = (keyword or "").strip()

        stats = RunStats(keyword=keyword, page_limit=page_limit)
        log = get_contextual_logger("runner", run_id=stats.run_id, keyword=keyword or None)
        log.info(f'Fetching tenders (keyword="{keyword}", pages={page_limit})')

        self.backend = self._create_backend()
        try:
            portal = await self._open_portal(self.backend)
            outcome = await portal.run(page_limit, keyword)

        except (TimeoutError, PlaywrightTimeoutError) as e:
            await self.backend.capture_screenshot("timeout")
            log.error(f"Acquisition timed out: {e}")
            raise ScrapeError(f"Timed out waiting for the listing: {e}", cause=TIMEOUT_CAUSE) from e

        except BackendError as e:
            await self.backend.capture_screenshot("error")
            log.error(f"Acquisition failed: {e}")
            cause = TIMEOUT_CAUSE if "timeout" in str(e).lower() else str(e)
            raise ScrapeError(str(e), cause=cause) from e

        except Exception as e:
            log.exception("Acquisition failed")
            raise ScrapeError(f"Scrape failed: {e}") from e

        finally:
            stats.finished_at = datetime.now(timezone.utc)
            await self.backend.close()

        stats.absorb(outcome)
        try:
            stats.stored_count = self.store.write(outcome.records)
        except OSError as e:
            log.error(f"Could not save tenders to {self.store.path}: {e}")
            raise ScrapeError(f"Could not save tenders: {e}", cause=str(e)) from e

        log.info(
            f"Saved {stats.stored_count} tenders "
            f"({stats.pages_parsed} pages, {stats.duplicates} duplicates, "
            f"{stats.cards_failed} failed cards)"
        )
        return stats

    def read_store(self) -> list[TenderRecord]:
        return self.store.read()


async def run_acquisition(
    page_limit: int,
    keyword: str = "",
    *,
    config: AppConfig | None = None,
    store: TenderStore | None = None,
) -> int:
    """Run one acquisition and return the number of tenders now stored.

    Raises:
        ValueError: If page_limit is out of range
        ScrapeError: If the run fails
    """
    runner = ScrapeRunner(config, store=store)
    await runner.run(page_limit, keyword)
    return runner.store.count()


def read_store(config: AppConfig | None = None) -> list[TenderRecord]:
    """Current stored tenders; empty when the store is missing or damaged."""
    config = config or AppConfig()
    return TenderStore(config.storage.store_path).read()
