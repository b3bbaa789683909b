"""Keyword matching engine."""

from .matcher import MatchMode, haystack, match_record, match_tenders, normalize_keywords

__all__ = [
    "MatchMode",
    "haystack",
    "match_record",
    "match_tenders",
    "normalize_keywords",
]
