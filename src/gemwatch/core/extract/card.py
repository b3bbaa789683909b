"""
Card parsing: turns one rendered listing card into a TenderRecord.

The card's visible text drives the field extractors; its HTML is only
used to collect links. Field extractors are independent of one another,
so a failure in one leaves the others intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from lxml import etree
from lxml import html as lxml_html

from gemwatch.persistence.models import TenderRecord

from .text import (
    BASE_URL,
    BID_NUMBER_PATTERN,
    RA_NUMBER_PATTERN,
    absolute_url,
    clean_lines,
    extract_first_match,
    extract_labeled_value,
    value_after_label,
)

logger = logging.getLogger(__name__)


DEPARTMENT_LABEL = "Department Name And Address:"
MINISTRY_PREFIX = "ministry"

# Listing link preference, most specific first
LISTING_PATH_HINTS = ("/bidlists/", "/showbid/", "/bid/")
DOCUMENT_PATH_HINT = "/showbidDocument/"


@dataclass(frozen=True)
class CardLink:
    """An anchor found inside a card."""

    href: str
    text: str = ""


def extract_links(card_html: str | None, base_url: str = BASE_URL) -> list[CardLink]:
    """Collect every anchor with a non-empty href, hrefs made absolute."""
    if not card_html or not card_html.strip():
        return []

    try:
        root = lxml_html.fragment_fromstring(card_html, create_parent="div")
    except (etree.ParserError, ValueError) as e:
        logger.debug(f"Card HTML could not be parsed: {e}")
        return []

    links: list[CardLink] = []
    for anchor in root.iter("a"):
        href = (anchor.get("href") or "").strip()
        if not href:
            continue
        text = " ".join(anchor.text_content().split())
        links.append(CardLink(href=absolute_url(href, base_url), text=text))

    return links


def pick_listing_link(links: list[CardLink]) -> CardLink | None:
    """Choose the link to the bid's own page."""
    for hint in LISTING_PATH_HINTS:
        for link in links:
            if hint in link.href:
                return link

    for link in links:
        if DOCUMENT_PATH_HINT not in link.href:
            return link

    return links[0] if links else None


def pick_document_link(links: list[CardLink]) -> CardLink | None:
    """Choose the link to the attached bid document."""
    for link in links:
        if DOCUMENT_PATH_HINT in link.href:
            return link
    for link in links:
        if ".pdf" in link.href.lower():
            return link
    return None


def _department(text: str, lines: list[str]) -> str:
    address = value_after_label(lines, DEPARTMENT_LABEL)
    if address:
        return address
    return next((line for line in lines if line.lower().startswith(MINISTRY_PREFIX)), "")


FieldExtractor = Callable[[str, list[str]], str]

FIELD_EXTRACTORS: dict[str, FieldExtractor] = {
    "bid_number": lambda text, lines: extract_first_match(BID_NUMBER_PATTERN, text),
    "ra_number": lambda text, lines: extract_first_match(RA_NUMBER_PATTERN, text),
    "department": _department,
    "start_date": lambda text, lines: extract_labeled_value("Start Date:", text),
    "end_date": lambda text, lines: extract_labeled_value("End Date:", text),
}


def extract_fields(
    text: str,
    extractors: dict[str, FieldExtractor] | None = None,
) -> dict[str, str]:
    """Run each extractor over the card text; a failing one yields ''."""
    extractors = FIELD_EXTRACTORS if extractors is None else extractors
    lines = clean_lines(text)
    values: dict[str, str] = {}

    for name, extractor in extractors.items():
        try:
            values[name] = extractor(text, lines) or ""
        except Exception as e:
            logger.debug(f"Extractor '{name}' failed: {e}")
            values[name] = ""

    return values


def parse_card(
    text: str | None,
    links: list[CardLink],
    extractors: dict[str, FieldExtractor] | None = None,
) -> TenderRecord:
    """Build a TenderRecord from a card's visible text and its links."""
    text = text or ""
    fields = extract_fields(text, extractors)

    listing = pick_listing_link(links)
    document = pick_document_link(links)

    title = (listing.text if listing else "") or next(iter(clean_lines(text)), "")

    return TenderRecord(
        bid_number=fields.get("bid_number", ""),
        ra_number=fields.get("ra_number", ""),
        title=title.strip(),
        department=fields.get("department", ""),
        buyer="",
        start_date=fields.get("start_date", ""),
        end_date=fields.get("end_date", ""),
        listing_url=listing.href if listing else "",
        doc_url=document.href if document else "",
    )
