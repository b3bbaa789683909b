"""
Text extraction helpers for listing cards.

Every function here is pure and total: missing or malformed input maps to
an empty string or an empty list, never an exception.
"""

from __future__ import annotations

import re

BASE_URL = "https://bidplus.gem.gov.in"

BID_NUMBER_PATTERN = re.compile(r"GEM/\d+/B/\d+")
RA_NUMBER_PATTERN = re.compile(r"GEM/\d+/R/\d+")

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def absolute_url(href: str | None, base_url: str = BASE_URL) -> str:
    """Resolve a card link against the site origin.

    Scheme-prefixed links are returned unchanged, so the function is
    idempotent.
    """
    if not href:
        return ""
    if _SCHEME.match(href):
        return href
    base = base_url.rstrip("/")
    return base + (href if href.startswith("/") else "/" + href)


def extract_first_match(pattern: re.Pattern[str] | str, text: str | None) -> str:
    """Return the first substring of text matching pattern, or ''."""
    match = re.search(pattern, text or "")
    return match.group(0) if match else ""


def clean_lines(text: str | None) -> list[str]:
    """Split on line breaks, strip each line and drop the empty ones."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def value_after_label(lines: list[str], label: str) -> str:
    """Return the line right after the first line starting with label.

    Matching is case-insensitive. '' when the label is missing or sits on
    the last line.
    """
    needle = (label or "").lower()
    for idx, line in enumerate(lines):
        if line.lower().startswith(needle):
            return lines[idx + 1] if idx + 1 < len(lines) else ""
    return ""


def extract_labeled_value(label: str, text: str | None) -> str:
    """Capture the rest of the line after a literal label such as 'End Date:'."""
    match = re.search(re.escape(label) + r"[ \t]*([^\r\n]*)", text or "")
    return match.group(1).strip() if match else ""
