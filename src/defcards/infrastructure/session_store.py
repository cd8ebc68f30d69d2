"""
JSON Session Store — per-day study counters in a JSON file.

Saving merges with what is already on disk, taking the larger value of each
counter per day, so a stale process can never move counters backwards.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from defcards.domain.interfaces import SessionStore
from defcards.domain.models import SessionRecord

logger = logging.getLogger(__name__)

# Field name -> keys accepted when reading; camelCase is the plugin's format.
_FIELD_KEYS = {
    "new_cards_studied": ("new_cards_studied", "newCardsStudied"),
    "review_cards_studied": ("review_cards_studied", "reviewCardsStudied"),
    "total_time_seconds": ("total_time_seconds", "totalTime"),
}


def _record_from_dict(data: Any) -> SessionRecord | None:
    if not isinstance(data, dict) or not isinstance(data.get("date"), str):
        return None
    values: dict[str, int] = {}
    for field, keys in _FIELD_KEYS.items():
        raw = next((data[k] for k in keys if k in data), 0)
        try:
            values[field] = max(0, int(raw))
        except (TypeError, ValueError):
            values[field] = 0
    return SessionRecord(date=data["date"], **values)


def merge_records(*groups: list[SessionRecord]) -> list[SessionRecord]:
    """Combine record lists into one record per date, keeping the larger counters."""
    by_date: dict[str, SessionRecord] = {}
    for group in groups:
        for r in group:
            cur = by_date.get(r.date)
            if cur is None:
                by_date[r.date] = SessionRecord(**r.to_dict())
                continue
            cur.new_cards_studied = max(cur.new_cards_studied, r.new_cards_studied)
            cur.review_cards_studied = max(cur.review_cards_studied, r.review_cards_studied)
            cur.total_time_seconds = max(cur.total_time_seconds, r.total_time_seconds)
    return [by_date[d] for d in sorted(by_date)]


class JsonSessionStore(SessionStore):
    def __init__(self, path: Path):
        self.path = path

    def load(self) -> list[SessionRecord]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[sessions] Could not read {self.path}: {e}")
            return []

        if isinstance(data, dict):
            data = data.get("study_sessions", data.get("studySessions", []))
        if not isinstance(data, list):
            logger.warning(f"[sessions] {self.path}: expected a list of sessions")
            return []

        records = []
        for entry in data:
            record = _record_from_dict(entry)
            if record is None:
                logger.debug(f"[sessions] Skipping malformed entry: {entry!r}")
                continue
            records.append(record)
        return records

    def save(self, records: list[SessionRecord]) -> None:
        merged = merge_records(self.load(), records)
        payload = json.dumps([r.to_dict() for r in merged], indent=2)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(payload + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"[sessions] Failed to write {self.path}: {e}")
            raise
