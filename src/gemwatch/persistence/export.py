"""
CSV export of stored and matched tenders.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable

from .models import MatchedRecord, TenderRecord

logger = logging.getLogger(__name__)

KEYWORD_DELIMITER = "|"

TENDER_COLUMNS = [
    "Bid No",
    "RA No",
    "Title",
    "Department",
    "Buyer",
    "Start Date",
    "End Date",
    "Link",
]

MATCH_COLUMNS = TENDER_COLUMNS + ["Matched Keywords", "Score"]


def tender_row(record: TenderRecord) -> list[str]:
    return [
        record.bid_number,
        record.ra_number,
        record.title,
        record.department,
        record.buyer,
        record.start_date,
        record.end_date,
        record.url,
    ]


def match_row(match: MatchedRecord) -> list[str]:
    return tender_row(match.record) + [
        KEYWORD_DELIMITER.join(match.matched_keywords),
        str(match.score),
    ]


def _write_csv(path: Path | str, header: list[str], rows: Iterable[list[str]]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)
            count += 1

    logger.info(f"Exported {count} rows to {path}")
    return path


def write_all_csv(records: Iterable[TenderRecord], path: Path | str) -> Path:
    """Write every stored tender to path."""
    return _write_csv(path, TENDER_COLUMNS, (tender_row(r) for r in records))


def write_matches_csv(matches: Iterable[MatchedRecord], path: Path | str) -> Path:
    """Write keyword matches, with their hits and score, to path."""
    return _write_csv(path, MATCH_COLUMNS, (match_row(m) for m in matches))
