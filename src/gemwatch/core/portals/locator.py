"""
Control location on the listing page.

The page carries several look-alike controls: a navbar search box next to
the listing's own keyword box, and pagination anchors that share labels
with unrelated links. Candidate extraction lives in the view; the choice
between candidates is made here by plain ranking functions.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence

from gemwatch.core.backends.base import ElementNotFound

from .oracle import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_SETTLE_MS,
    DEFAULT_TIMEOUT_MS,
    ListingSnapshot,
    wait_for_listing_update,
)

if TYPE_CHECKING:
    from .view import PlaywrightListingView

logger = logging.getLogger(__name__)


KEYWORD_PLACEHOLDER = re.compile(r"enter\s+keywords?", re.IGNORECASE)

DEFAULT_NAVBAR_INPUT_ID = "search"

DEFAULT_NEXT_SELECTORS = (
    'a:has-text("Next")[href^="#page-"]',
    'a[href^="#page-"]:has-text("Next")',
)


@dataclass(frozen=True)
class InputCandidate:
    """A keyword input found on the page."""

    handle: Any
    element_id: str = ""
    placeholder: str = ""
    visible: bool = False
    y: float = 0.0


def rank_keyword_inputs(
    candidates: Sequence[InputCandidate],
    navbar_input_id: str = DEFAULT_NAVBAR_INPUT_ID,
) -> list[InputCandidate]:
    """Order plausible listing keyword inputs, best first.

    Drops hidden inputs, inputs without an 'Enter Keyword(s)' placeholder
    and the navbar search box; the rest are ordered lowest on the page
    first, since the listing box renders below the navbar.
    """
    navbar_id = navbar_input_id.lower()
    survivors = [
        c
        for c in candidates
        if c.visible
        and KEYWORD_PLACEHOLDER.search(c.placeholder or "")
        and (c.element_id or "").lower() != navbar_id
    ]
    return sorted(survivors, key=lambda c: c.y, reverse=True)


class ControlLocator:
    """Finds and drives the listing's keyword search and pagination."""

    def __init__(
        self,
        view: PlaywrightListingView,
        *,
        navbar_input_id: str = DEFAULT_NAVBAR_INPUT_ID,
        next_selectors: Sequence[str] = DEFAULT_NEXT_SELECTORS,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        settle_ms: int = DEFAULT_SETTLE_MS,
        type_delay_ms: int = 25,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.view = view
        self.navbar_input_id = navbar_input_id
        self.next_selectors = tuple(next_selectors)
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self.settle_ms = settle_ms
        self.type_delay_ms = type_delay_ms
        self.clock = clock
        self.sleep = sleep

    async def wait_for_update(self, prior: ListingSnapshot) -> ListingSnapshot:
        """Block until the listing has refreshed relative to prior."""
        return await wait_for_listing_update(
            self.view.snapshot,
            prior,
            timeout_ms=self.timeout_ms,
            poll_interval_ms=self.poll_interval_ms,
            settle_ms=self.settle_ms,
            clock=self.clock,
            sleep=self.sleep,
        )

    async def find_keyword_input(self) -> InputCandidate | None:
        """Locate the listing's own keyword box, or None."""
        candidates = await self.view.keyword_input_candidates()
        ranked = rank_keyword_inputs(candidates, self.navbar_input_id)

        logger.debug(f"Keyword inputs: {len(candidates)} found, {len(ranked)} eligible")

        return ranked[0] if ranked else None

    async def apply_keyword_filter(self, candidate: InputCandidate, keyword: str) -> int:
        """Type keyword into the input, submit it and wait for the refresh.

        Returns:
            Number of cards visible afterwards; 0 means no results
        """
        handle = candidate.handle

        await handle.wait_for(state="visible", timeout=self.timeout_ms)
        try:
            await handle.scroll_into_view_if_needed()
        except Exception as e:
            logger.debug(f"Scroll to keyword input failed: {e}")

        prior = await self.view.snapshot()

        await handle.fill("")
        await handle.press_sequentially(keyword, delay=self.type_delay_ms)

        trigger = await self.view.search_trigger_for(handle)
        if trigger is None:
            logger.debug("No search button beside keyword input; pressing Enter")
            await handle.press("Enter")
        else:
            try:
                await trigger.click()
            except Exception as e:
                logger.debug(f"Search button click failed ({e}); pressing Enter")
                await handle.press("Enter")

        await self.view.wait_for_page_ready()
        await self.wait_for_update(prior)

        return await self.view.card_count()

    async def search(self, keyword: str) -> int:
        """Apply keyword through the listing's search box.

        Raises:
            ElementNotFound: If the listing keyword input cannot be found
        """
        candidate = await self.find_keyword_input()
        if candidate is None:
            raise ElementNotFound("Could not find Bid Listing keyword input.")

        logger.info(f'Applying listing search keyword: "{keyword}"')
        return await self.apply_keyword_filter(candidate, keyword)

    async def find_next_page_control(self) -> Any | None:
        """Visible 'Next' anchor targeting a #page-N fragment, or None.

        None is the normal end-of-listing signal.
        """
        for selector in self.next_selectors:
            link = await self.view.next_link(selector)
            if link is not None:
                return link
        return None
