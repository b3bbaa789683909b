"""Shared fixtures and fakes for the listing tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from gemwatch.core.portals.locator import ControlLocator, InputCandidate
from gemwatch.core.portals.oracle import ListingSnapshot, ListingTimeout
from gemwatch.core.portals.view import RawCard
from gemwatch.persistence.models import TenderRecord


# =============================================================================
# Virtual clock
# =============================================================================


class VirtualClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []
        self.hooks: list[Callable[[float], None]] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        for hook in self.hooks:
            hook(self.now)


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


# =============================================================================
# Cards
# =============================================================================


def card_text(
    bid: str = "GEM/2025/B/6012345",
    title: str = "Road construction work",
    ra: str = "",
    department: str = "Ministry of Road Transport and Highways",
    start: str = "01-01-2026 10:00 AM",
    end: str = "15-01-2026 6:00 PM",
) -> str:
    lines = [f"BID NO: {bid}"]
    if ra:
        lines.append(f"RA NO: {ra}")
    lines += [
        "Items:",
        title,
        "Department Name And Address:",
        department,
        f"Start Date: {start}",
        f"End Date: {end}",
    ]
    return "\n".join(lines)


def card_html(slug: str, title: str = "Road construction work", bid: str = "GEM/2025/B/6012345") -> str:
    return (
        f'<div class="block"><a href="/showbidDocument/{slug}">{bid}</a></div>'
        f'<p><a href="/bidlists/{slug}"> {title} </a></p>'
    )


def make_card(slug: str, title: str = "Road construction work", bid: str | None = None) -> RawCard:
    bid = bid or f"GEM/2025/B/{slug}"
    return RawCard(text=card_text(bid=bid, title=title), html=card_html(slug, title, bid))


class BrokenCard:
    """A card element whose text cannot be read."""


# =============================================================================
# Fake DOM handles
# =============================================================================


class FakeInput:
    def __init__(self, view: "FakeListingView") -> None:
        self.view = view
        self.value = ""
        self.typed: list[tuple[str, int]] = []
        self.pressed: list[str] = []
        self.scrolled = False

    async def wait_for(self, state: str = "visible", timeout: int | None = None) -> None:
        return None

    async def scroll_into_view_if_needed(self) -> None:
        self.scrolled = True

    async def fill(self, value: str) -> None:
        self.value = value

    async def press_sequentially(self, text: str, delay: int = 0) -> None:
        self.typed.append((text, delay))
        self.value += text

    async def press(self, key: str) -> None:
        self.pressed.append(key)
        if key == "Enter":
            self.view.submit(self.value)


class FakeTrigger:
    def __init__(self, view: "FakeListingView", field: FakeInput, broken: bool = False) -> None:
        self.view = view
        self.field = field
        self.broken = broken
        self.clicks = 0

    async def click(self) -> None:
        self.clicks += 1
        if self.broken:
            raise RuntimeError("element is detached")
        self.view.submit(self.field.value)


class FakeLink:
    def __init__(self, view: "FakeListingView", selector: str) -> None:
        self.view = view
        self.selector = selector
        self.clicks = 0

    async def scroll_into_view_if_needed(self) -> None:
        return None

    async def click(self) -> None:
        self.clicks += 1
        self.view.goto_page(self.view.index + 1)


# =============================================================================
# Fake listing view
# =============================================================================


@dataclass
class FakeListingView:
    """In-memory stand-in for PlaywrightListingView.

    pages holds the cards of each hash page; search_results maps a
    keyword to the pages shown after searching for it.
    """

    pages: list[list] = field(default_factory=list)
    search_results: dict[str, list[list]] = field(default_factory=dict)
    next_selectors: tuple[str, ...] = ()
    inputs: list[InputCandidate] = field(default_factory=list)
    trigger: FakeTrigger | None = None

    index: int = 0
    fragment: str = ""
    submitted: list[str] = field(default_factory=list)
    ready_waits: int = 0
    card_reads: int = 0

    @property
    def cards(self) -> list:
        return self.pages[self.index] if self.pages else []

    def goto_page(self, index: int) -> None:
        self.index = index
        self.fragment = f"#page-{index + 1}"

    def submit(self, keyword: str) -> None:
        self.submitted.append(keyword)
        self.pages = self.search_results.get(keyword, [[]])
        self.index = 0

    async def snapshot(self) -> ListingSnapshot:
        cards = self.cards
        first = cards[0].text if cards and isinstance(cards[0], RawCard) else ""
        return ListingSnapshot(first_card_text=first, card_count=len(cards), fragment=self.fragment)

    async def card_count(self) -> int:
        return len(self.cards)

    async def wait_for_cards(self, timeout_ms: int | None = None) -> None:
        if not self.cards:
            raise ListingTimeout("no cards", timeout_ms=timeout_ms or 0)

    async def wait_for_page_ready(self, timeout_ms: int | None = None) -> None:
        self.ready_waits += 1

    async def card_elements(self) -> list:
        return list(self.cards)

    async def read_card(self, element) -> RawCard:
        self.card_reads += 1
        if isinstance(element, BrokenCard):
            raise RuntimeError("Element is not attached to the DOM")
        return element

    async def keyword_input_candidates(self) -> list[InputCandidate]:
        return list(self.inputs)

    async def search_trigger_for(self, handle) -> FakeTrigger | None:
        return self.trigger

    async def next_link(self, selector: str) -> FakeLink | None:
        if self.next_selectors and selector not in self.next_selectors:
            return None
        if self.index + 1 < len(self.pages):
            return FakeLink(self, selector)
        return None


def keyword_input(view: FakeListingView, y: float = 420.0) -> tuple[FakeInput, InputCandidate]:
    field_ = FakeInput(view)
    candidate = InputCandidate(
        handle=field_,
        element_id="searchBid",
        placeholder="Enter Keyword",
        visible=True,
        y=y,
    )
    return field_, candidate


@pytest.fixture
def make_locator(clock: VirtualClock):
    def factory(view: FakeListingView, **kwargs) -> ControlLocator:
        kwargs.setdefault("timeout_ms", 2000)
        return ControlLocator(view, clock=clock, sleep=clock.sleep, **kwargs)

    return factory


@pytest.fixture
def records() -> list[TenderRecord]:
    return [
        TenderRecord(bid_number="GEM/2025/B/1", title="Road construction work"),
        TenderRecord(bid_number="GEM/2025/B/2", title="Bridge maintenance"),
    ]
