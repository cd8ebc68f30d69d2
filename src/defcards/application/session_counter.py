"""Per-day counters of cards studied."""

import logging
from datetime import date

from defcards.application.utils.common import format_day, utc_today
from defcards.domain.interfaces import SessionStore
from defcards.domain.models import SessionRecord

logger = logging.getLogger(__name__)


class SessionCounter:
    """
    Tracks how many new and review cards were studied on each calendar day.

    Holds at most one SessionRecord per date; counters only ever grow.
    """

    def __init__(self, records: list[SessionRecord] | None = None):
        self._by_date: dict[str, SessionRecord] = {}
        for record in records or []:
            self._merge(record)

    def _merge(self, record: SessionRecord) -> None:
        existing = self._by_date.get(record.date)
        if existing is None:
            self._by_date[record.date] = SessionRecord(
                date=record.date,
                new_cards_studied=max(0, record.new_cards_studied),
                review_cards_studied=max(0, record.review_cards_studied),
                total_time_seconds=max(0, record.total_time_seconds),
            )
            return
        existing.new_cards_studied = max(existing.new_cards_studied, record.new_cards_studied)
        existing.review_cards_studied = max(
            existing.review_cards_studied, record.review_cards_studied
        )
        existing.total_time_seconds = max(existing.total_time_seconds, record.total_time_seconds)

    def record_outcome(
        self,
        was_new_card: bool,
        today: date | None = None,
        elapsed_seconds: int = 0,
    ) -> SessionRecord:
        """Count one graded card against today, creating today's record if needed."""
        key = format_day(today or utc_today())
        record = self._by_date.get(key)
        if record is None:
            record = SessionRecord(date=key)
            self._by_date[key] = record

        if was_new_card:
            record.new_cards_studied += 1
        else:
            record.review_cards_studied += 1
        record.total_time_seconds += max(0, int(elapsed_seconds))
        return record

    def today_session(self, today: date | None = None) -> SessionRecord:
        """Today's counters. A zeroed record (not stored) when nothing was studied."""
        key = format_day(today or utc_today())
        record = self._by_date.get(key)
        if record is None:
            return SessionRecord(date=key)
        return SessionRecord(**record.to_dict())

    @property
    def records(self) -> list[SessionRecord]:
        """All records sorted by date (copies)."""
        return [SessionRecord(**self._by_date[d].to_dict()) for d in sorted(self._by_date)]

    def load(self, store: SessionStore) -> None:
        for record in store.load():
            self._merge(record)
        logger.debug(f"[sessions] Loaded {len(self._by_date)} day(s)")

    def save(self, store: SessionStore) -> None:
        store.save(self.records)
