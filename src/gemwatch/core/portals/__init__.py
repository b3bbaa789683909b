"""Listing page driver, control locator and change detection."""

from .oracle import (
    ListingSnapshot,
    ListingTimeout,
    listing_changed,
    wait_for_listing_update,
)
from .locator import ControlLocator, InputCandidate, rank_keyword_inputs
from .view import PlaywrightListingView, RawCard
from .gem_listing import GemListingPortal, ListingOutcome, ListingState, StopReason

__all__ = [
    # Change detection
    "ListingSnapshot",
    "ListingTimeout",
    "listing_changed",
    "wait_for_listing_update",
    # Control location
    "ControlLocator",
    "InputCandidate",
    "rank_keyword_inputs",
    # DOM access
    "PlaywrightListingView",
    "RawCard",
    # Driver
    "GemListingPortal",
    "ListingOutcome",
    "ListingState",
    "StopReason",
]
