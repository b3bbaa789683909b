"""
Playwright-backed reads of the listing page.

All DOM access used by the locator and the listing driver goes through
PlaywrightListingView, so both can be exercised against fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .locator import InputCandidate
from .oracle import ListingSnapshot, ListingTimeout

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Locator, Page

    from gemwatch.core.config.models import SiteConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawCard:
    """Visible text and markup of one card."""

    text: str
    html: str = ""


class PlaywrightListingView:
    """DOM reads and waits against the listing page."""

    def __init__(self, page: Page, site: SiteConfig, timeout_ms: int = 60000):
        self.page = page
        self.site = site
        self.timeout_ms = timeout_ms

    @property
    def cards(self) -> Locator:
        return self.page.locator(self.site.card_selector)

    async def card_count(self) -> int:
        return await self.cards.count()

    async def fragment(self) -> str:
        return await self.page.evaluate("() => location.hash || ''")

    async def snapshot(self) -> ListingSnapshot:
        """Capture first-card text, card count and URL fragment.

        A failed card count propagates, so the poll treats the read as
        inconclusive; the text and fragment fall back to ''.
        """
        count = await self.card_count()

        first = ""
        if count:
            try:
                first = await self.cards.first.inner_text(timeout=1000)
            except Exception:
                first = ""

        try:
            fragment = await self.fragment()
        except Exception:
            fragment = ""

        return ListingSnapshot(first_card_text=first, card_count=count, fragment=fragment)

    async def wait_for_cards(self, timeout_ms: int | None = None) -> None:
        """Block until at least one card is attached.

        Raises:
            ListingTimeout: If no card appears within the budget
        """
        timeout = timeout_ms or self.timeout_ms
        try:
            await self.page.wait_for_selector(
                self.site.card_selector,
                state="attached",
                timeout=timeout,
            )
        except PlaywrightTimeoutError as e:
            raise ListingTimeout(
                f"No '{self.site.card_selector}' cards within {timeout} ms",
                timeout_ms=timeout,
            ) from e

    async def wait_for_page_ready(self, timeout_ms: int | None = None) -> None:
        """Best-effort wait for DOM content and network quiet."""
        timeout = timeout_ms or self.timeout_ms
        for state in ("domcontentloaded", "networkidle"):
            try:
                await self.page.wait_for_load_state(state, timeout=timeout)
            except PlaywrightTimeoutError:
                logger.debug(f"Load state '{state}' not reached; continuing")

    async def card_elements(self) -> list[ElementHandle]:
        return await self.page.query_selector_all(self.site.card_selector)

    async def read_card(self, element: ElementHandle) -> RawCard:
        text = await element.inner_text()
        html = await element.inner_html()
        return RawCard(text=text, html=html)

    async def keyword_input_candidates(self) -> list[InputCandidate]:
        """Enumerate keyword inputs with the attributes the ranking needs."""
        inputs = self.page.locator(self.site.keyword_input_selector)
        candidates: list[InputCandidate] = []

        for i in range(await inputs.count()):
            el = inputs.nth(i)
            element_id = await el.get_attribute("id") or ""
            placeholder = await el.get_attribute("placeholder") or ""

            try:
                visible = await el.is_visible()
            except Exception:
                visible = False

            box: dict[str, Any] | None
            try:
                box = await el.bounding_box()
            except Exception:
                box = None

            candidates.append(
                InputCandidate(
                    handle=el,
                    element_id=element_id,
                    placeholder=placeholder,
                    visible=visible,
                    y=box["y"] if box else 0.0,
                )
            )

        return candidates

    async def search_trigger_for(self, handle: Locator) -> Locator | None:
        """Search button inside the keyword input's own group, if visible."""
        button = handle.locator(self.site.search_trigger_selector).first
        try:
            if await button.is_visible():
                return button
        except Exception as e:
            logger.debug(f"Search trigger lookup failed: {e}")
        return None

    async def next_link(self, selector: str) -> Locator | None:
        """First element matching selector, if it is currently visible."""
        link = self.page.locator(selector).first
        try:
            if await link.is_visible():
                return link
        except Exception as e:
            logger.debug(f"Next link lookup failed for {selector!r}: {e}")
        return None
