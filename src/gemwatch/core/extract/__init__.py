"""Text and card extraction for listing pages."""

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
from .card import (
    FIELD_EXTRACTORS,
    CardLink,
    extract_fields,
    extract_links,
    parse_card,
    pick_document_link,
    pick_listing_link,
)

__all__ = [
    "BASE_URL",
    "BID_NUMBER_PATTERN",
    "RA_NUMBER_PATTERN",
    "absolute_url",
    "clean_lines",
    "extract_first_match",
    "extract_labeled_value",
    "value_after_label",
    "FIELD_EXTRACTORS",
    "CardLink",
    "extract_fields",
    "extract_links",
    "parse_card",
    "pick_document_link",
    "pick_listing_link",
]
