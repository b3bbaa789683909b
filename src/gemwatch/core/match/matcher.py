"""
Keyword matching over stored tenders.

A tender is dropped when any exclude keyword occurs in its text. Otherwise
the include keywords that occur are its hits; ANY mode needs one hit, ALL
mode needs every include keyword. Matches are ranked by hit count.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable

from gemwatch.persistence.models import MatchedRecord, TenderRecord

_WHITESPACE = re.compile(r"\s+")


class MatchMode(str, Enum):
    """How include keywords combine."""

    ANY = "ANY"
    ALL = "ALL"

    @classmethod
    def parse(cls, value: "str | MatchMode | None") -> "MatchMode":
        """Case-insensitive lookup; empty input means ANY."""
        if isinstance(value, MatchMode):
            return value
        text = (value or "").strip().upper()
        if not text:
            return cls.ANY
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown match mode: {value!r} (expected ANY or ALL)") from None


def normalize_keywords(raw: str | Iterable[str] | None) -> list[str]:
    """Split a comma-separated keyword list into lowercase tokens.

    Tokens are stripped, empty ones dropped, and repeats removed keeping
    first-seen order.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw

    keywords: list[str] = []
    for part in parts:
        token = str(part).strip().lower()
        if token and token not in keywords:
            keywords.append(token)
    return keywords


def haystack(record: TenderRecord) -> str:
    """Searchable text of a record: its fields joined, collapsed, lowercased."""
    parts = [
        record.bid_number,
        record.ra_number,
        record.title,
        record.department,
        record.buyer,
        record.start_date,
        record.end_date,
        record.url,
    ]
    text = " ".join(part for part in parts if part)
    return _WHITESPACE.sub(" ", text).strip().lower()


def match_record(
    record: TenderRecord,
    include: list[str],
    exclude: list[str],
    mode: MatchMode,
) -> MatchedRecord | None:
    """Match one record against normalized keyword lists."""
    text = haystack(record)

    if any(word in text for word in exclude):
        return None

    hits = [word for word in include if word in text]

    if mode is MatchMode.ALL:
        accepted = len(hits) == len(include)
    else:
        accepted = bool(hits)

    if not accepted:
        return None
    return MatchedRecord(record=record, matched_keywords=tuple(hits))


def match_tenders(
    records: Iterable[TenderRecord],
    include: str | Iterable[str],
    exclude: str | Iterable[str] | None = "",
    mode: str | MatchMode | None = MatchMode.ANY,
) -> list[MatchedRecord]:
    """Filter and rank records by include/exclude keywords.

    Args:
        records: Stored tenders, in store order
        include: Comma-separated (or listed) keywords to look for
        exclude: Keywords that disqualify a record
        mode: ANY or ALL

    Returns:
        Matches by descending score; equal scores keep input order

    Raises:
        ValueError: If include has no keywords or mode is unknown
    """
    include_words = normalize_keywords(include)
    if not include_words:
        raise ValueError("Include keywords are required.")

    exclude_words = normalize_keywords(exclude)
    match_mode = MatchMode.parse(mode)

    matches = [
        matched
        for matched in (
            match_record(record, include_words, exclude_words, match_mode)
            for record in records
        )
        if matched is not None
    ]

    # list.sort is stable, so ties keep store order
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches
