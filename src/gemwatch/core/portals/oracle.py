"""
Change detection for the listing region.

The listing refreshes in two ways: an in-place AJAX re-render after a
keyword search, and hash pagination (#page-2) with no navigation event.
No single signal covers both, so the listing counts as refreshed as soon
as any of them fires.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60000
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_SETTLE_MS = 500


class ListingTimeout(TimeoutError):
    """The listing did not refresh within the wait budget."""

    def __init__(self, message: str, timeout_ms: int, last: "ListingSnapshot | None" = None):
        super().__init__(message)
        self.timeout_ms = timeout_ms
        self.last = last


@dataclass(frozen=True)
class ListingSnapshot:
    """Observable state of the listing region at one instant."""

    first_card_text: str = ""
    card_count: int = 0
    fragment: str = ""


EMPTY_SNAPSHOT = ListingSnapshot()

SnapshotReader = Callable[[], Awaitable[ListingSnapshot]]


def listing_changed(prior: ListingSnapshot, current: ListingSnapshot) -> bool:
    """Whether current shows a refreshed listing relative to prior."""
    if prior.fragment and current.fragment and current.fragment != prior.fragment:
        return True
    if prior.card_count and current.card_count != prior.card_count:
        return True
    if prior.first_card_text and current.first_card_text and (
        current.first_card_text != prior.first_card_text
    ):
        return True
    # Minimum signal: the listing has cards at all
    return current.card_count > 0


async def wait_for_listing_update(
    read_snapshot: SnapshotReader,
    prior: ListingSnapshot = EMPTY_SNAPSHOT,
    *,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    settle_ms: int = DEFAULT_SETTLE_MS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ListingSnapshot:
    """Poll the listing until it differs from prior, then let it settle.

    Args:
        read_snapshot: Coroutine function returning the current snapshot
        prior: Snapshot captured before the triggering action
        timeout_ms: Deadline for the condition to hold
        poll_interval_ms: Delay between reads
        settle_ms: Delay after the condition holds, for rendering to finish
        clock: Monotonic clock in seconds
        sleep: Async sleep taking seconds

    Returns:
        The snapshot that satisfied the condition

    Raises:
        ListingTimeout: If the deadline passes first
    """
    deadline = clock() + timeout_ms / 1000
    current = EMPTY_SNAPSHOT

    while True:
        try:
            current = await read_snapshot()
        except Exception as e:
            # A failed read says nothing about the listing; keep polling
            logger.debug(f"Listing read failed: {e}")
        else:
            if listing_changed(prior, current):
                break

        if clock() >= deadline:
            raise ListingTimeout(
                f"Listing did not update within {timeout_ms} ms",
                timeout_ms=timeout_ms,
                last=current,
            )

        await sleep(poll_interval_ms / 1000)

    logger.debug(
        f"Listing updated: {current.card_count} cards, fragment={current.fragment!r}"
    )

    if settle_ms:
        await sleep(settle_ms / 1000)

    return current
