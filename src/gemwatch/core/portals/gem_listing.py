"""
GeM bid listing driver.

Walks the listing as a small state machine:

    INIT -> LOADED -> [FILTER_APPLIED] -> PARSING_PAGE(1) -> ADVANCING
         -> PARSING_PAGE(2) -> ... -> DONE

The run ends when no visible Next control remains, when the page limit is
reached, or straight after a keyword filter that leaves zero cards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from gemwatch.core.extract.card import extract_links, parse_card
from gemwatch.core.extract.text import BASE_URL
from gemwatch.persistence.models import SeenKeySet, TenderRecord

if TYPE_CHECKING:
    from .locator import ControlLocator
    from .view import PlaywrightListingView

logger = logging.getLogger(__name__)


class ListingState(str, Enum):
    """Driver states."""

    INIT = "init"
    LOADED = "loaded"
    FILTER_APPLIED = "filter_applied"
    PARSING_PAGE = "parsing_page"
    ADVANCING = "advancing"
    DONE = "done"


class StopReason(str, Enum):
    """Why a run reached DONE."""

    NO_NEXT_PAGE = "no_next_page"
    PAGE_LIMIT = "page_limit"
    ZERO_RESULTS = "zero_results"


@dataclass
class ListingOutcome:
    """Result of one pass over the listing."""

    records: list[TenderRecord] = field(default_factory=list)
    pages_parsed: int = 0
    cards_seen: int = 0
    cards_failed: int = 0
    duplicates: int = 0
    stop_reason: StopReason | None = None


class GemListingPortal:
    """Pages through the bid listing and collects unique tender records.

    One instance serves one run: it owns the run's seen-key set and must
    not be shared between concurrent runs.
    """

    def __init__(
        self,
        view: PlaywrightListingView,
        locator: ControlLocator,
        *,
        base_url: str = BASE_URL,
        seen: SeenKeySet | None = None,
        timeout_ms: int = 60000,
    ) -> None:
        self.view = view
        self.locator = locator
        self.base_url = base_url
        self.seen = seen if seen is not None else SeenKeySet()
        self.timeout_ms = timeout_ms

        self.state = ListingState.INIT
        self.state_history: list[ListingState] = [ListingState.INIT]
        self.current_page = 0

    def _transition(self, state: ListingState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.state_history.append(state)

    def _finish(self, outcome: ListingOutcome, reason: StopReason) -> ListingOutcome:
        outcome.stop_reason = reason
        self._transition(ListingState.DONE)
        logger.info(
            f"Listing done ({reason.value}): {len(outcome.records)} tenders "
            f"from {outcome.pages_parsed} pages"
        )
        return outcome

    async def run(self, page_limit: int, keyword: str = "") -> ListingOutcome:
        """Collect tenders from up to page_limit listing pages.

        Args:
            page_limit: Maximum number of pages to parse (>= 1)
            keyword: Optional listing search keyword

        Returns:
            ListingOutcome with records in discovery order

        Raises:
            ListingTimeout: If a page-level wait runs out
            ElementNotFound: If a keyword is given but no search box exists
        """
        if page_limit < 1:
            raise ValueError("page_limit must be at least 1")

        outcome = ListingOutcome()

        await self.view.wait_for_cards(self.timeout_ms)
        self._transition(ListingState.LOADED)

        keyword = (keyword or "").strip()
        if keyword:
            count = await self.locator.search(keyword)
            self._transition(ListingState.FILTER_APPLIED)
            if not count:
                logger.info(f'No results (0 cards) after searching "{keyword}".')
                return self._finish(outcome, StopReason.ZERO_RESULTS)

        page_number = 1
        while True:
            self._transition(ListingState.PARSING_PAGE)
            self.current_page = page_number
            await self.parse_current_page(outcome)

            if page_number >= page_limit:
                return self._finish(outcome, StopReason.PAGE_LIMIT)

            next_link = await self.locator.find_next_page_control()
            if next_link is None:
                logger.info("No Next button found. Stopping.")
                return self._finish(outcome, StopReason.NO_NEXT_PAGE)

            self._transition(ListingState.ADVANCING)
            await self.advance(next_link)
            page_number += 1

    async def parse_current_page(self, outcome: ListingOutcome) -> int:
        """Parse every card on the current page into outcome.

        A card that fails to read or parse is logged and skipped.

        Returns:
            Number of new records admitted from this page
        """
        page = self.current_page
        logger.info(f"Reading page {page}", extra={"page": page})

        await self.view.wait_for_cards(self.timeout_ms)
        elements = await self.view.card_elements()

        admitted = 0
        for index, element in enumerate(elements):
            outcome.cards_seen += 1
            try:
                raw = await self.view.read_card(element)
                record = parse_card(raw.text, extract_links(raw.html, self.base_url))
            except Exception as e:
                outcome.cards_failed += 1
                logger.warning(f"Card parse failed (card {index + 1}): {e}", extra={"page": page})
                continue

            if not self.seen.admit(record):
                outcome.duplicates += 1
                continue

            outcome.records.append(record)
            admitted += 1

        outcome.pages_parsed += 1
        logger.debug(f"Page {page}: {len(elements)} cards, {admitted} new", extra={"page": page})
        return admitted

    async def advance(self, next_link) -> None:
        """Click the Next control and wait for the listing to refresh."""
        prior = await self.view.snapshot()

        try:
            await next_link.scroll_into_view_if_needed()
        except Exception as e:
            logger.debug(f"Scroll to Next failed: {e}")

        await next_link.click()
        await self.locator.wait_for_update(prior)
