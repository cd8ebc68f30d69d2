"""
Study Stats Service — Application layer orchestrator.

Gathers card states and session history and hands them to the calculator.
"""

import logging
from datetime import date

from defcards.application.flashcard_service import FlashcardService
from defcards.application.session_counter import SessionCounter
from defcards.application.utils.common import utc_today
from defcards.domain.models import StudyStats

from .metrics_calculator import MetricsCalculator

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(
        self,
        flashcards: FlashcardService,
        counter: SessionCounter,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            flashcards: Source of the current card states.
            counter: Source of the per-day session history.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._flashcards = flashcards
        self._counter = counter
        self._calc = calculator or MetricsCalculator()

    def get_stats(self, today: date | None = None, now: int | None = None) -> StudyStats:
        today = today or utc_today()
        states = self._flashcards.card_states(now)
        stats = self._calc.compute(self._counter.records, states, today)
        logger.debug(
            f"[stats] {stats.total_cards} card(s), streak {stats.current_streak}d, "
            f"accuracy {stats.average_accuracy}"
        )
        return stats
