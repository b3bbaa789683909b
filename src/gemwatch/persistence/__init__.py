"""Tender records, the JSON store and CSV export."""

from .models import MatchedRecord, SeenKeySet, TenderRecord
from .store import TenderStore
from .export import write_all_csv, write_matches_csv

__all__ = [
    "MatchedRecord",
    "SeenKeySet",
    "TenderRecord",
    "TenderStore",
    "write_all_csv",
    "write_matches_csv",
]
