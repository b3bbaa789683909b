"""
Record types for discovered tenders.

TenderRecord is the unit the listing driver produces and the store
persists. MatchedRecord wraps a TenderRecord with keyword-match results
and is never written back to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# JSON key for each dataclass field, in persisted order
JSON_FIELDS: dict[str, str] = {
    "bid_number": "bidNumber",
    "ra_number": "raNumber",
    "title": "title",
    "department": "department",
    "buyer": "buyer",
    "start_date": "startDate",
    "end_date": "endDate",
    "listing_url": "listingUrl",
    "doc_url": "docUrl",
}

# Older stores used the short identifier keys
LEGACY_KEYS: dict[str, str] = {
    "bidNo": "bid_number",
    "raNo": "ra_number",
}


@dataclass(frozen=True)
class TenderRecord:
    """One bid card as discovered on the listing."""

    bid_number: str = ""
    ra_number: str = ""
    title: str = ""
    department: str = ""
    # Never populated from the listing; kept for the export columns.
    buyer: str = ""
    start_date: str = ""
    end_date: str = ""
    listing_url: str = ""
    doc_url: str = ""

    @property
    def dedup_key(self) -> str:
        return "|".join((self.bid_number, self.ra_number, self.listing_url))

    @property
    def url(self) -> str:
        """Best link for the record: the listing page, else the document."""
        return self.listing_url or self.doc_url

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for attr, key in JSON_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TenderRecord":
        """Build a record from a stored JSON object.

        Unknown keys are ignored, missing ones default to '' and
        non-string values are coerced to strings.
        """
        values: dict[str, str] = {}

        for legacy_key, attr in LEGACY_KEYS.items():
            if data.get(legacy_key) is not None:
                values[attr] = str(data[legacy_key])

        for attr, key in JSON_FIELDS.items():
            if data.get(key) is not None:
                values[attr] = str(data[key])

        return cls(**values)


@dataclass(frozen=True)
class MatchedRecord:
    """A TenderRecord accepted by the keyword matcher."""

    record: TenderRecord
    matched_keywords: tuple[str, ...] = ()

    @property
    def score(self) -> int:
        return len(self.matched_keywords)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = self.record.to_dict()
        data["url"] = self.record.url
        data["matchedKeywords"] = list(self.matched_keywords)
        data["score"] = self.score
        return data


@dataclass
class SeenKeySet:
    """Dedup keys admitted during one acquisition run."""

    keys: set[str] = field(default_factory=set)

    def admit(self, record: TenderRecord) -> bool:
        """Record the key; False when it was already seen this run."""
        key = record.dedup_key
        if key in self.keys:
            return False
        self.keys.add(key)
        return True

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, record: object) -> bool:
        return isinstance(record, TenderRecord) and record.dedup_key in self.keys
