"""
JSON file store for the latest acquisition run.

The store holds a single JSON array of tender objects. Each run replaces
the whole file; readers treat a missing or damaged file as empty.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

import orjson

from .models import TenderRecord

logger = logging.getLogger(__name__)


class TenderStore:
    """Full-overwrite JSON array store.

    Concurrent writers are not coordinated here; callers must run one
    acquisition at a time against a given path.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> list[TenderRecord]:
        """Load stored records in their persisted order.

        Returns an empty list when the file is absent, unreadable, not valid
        JSON, or not an array.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning(f"Cannot read store {self.path}: {e}")
            return []

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Store {self.path} is not valid JSON: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Store {self.path} does not hold an array")
            return []

        return [TenderRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def write(self, records: Iterable[TenderRecord]) -> int:
        """Replace the stored array with records.

        Written to a sibling temp file first and moved into place, so a
        reader never observes a half-written array.

        Returns:
            Number of records written
        """
        items = [record.to_dict() for record in records]
        payload = orjson.dumps(items, option=orjson.OPT_INDENT_2)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved {len(items)} tenders to {self.path}")
        return len(items)

    def count(self) -> int:
        return len(self.read())
