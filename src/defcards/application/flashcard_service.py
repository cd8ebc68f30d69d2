"""
Flashcard Service — Application layer orchestrator.

Connects the definition index, the review state store, the scheduler and
the session counter: builds today's queue and records grades.
"""

import logging
import random
from datetime import date

from defcards.application.config import FlashcardConfig
from defcards.application.definition_index import DefinitionIndex
from defcards.application.queue_builder import (
    QueueBuildResult,
    build_extra_session_queue,
    build_today_queue,
    in_study_scope,
)
from defcards.application.scheduler import create_new, update
from defcards.application.session_counter import SessionCounter
from defcards.application.utils.common import now_ms
from defcards.domain.errors import UnknownTermError
from defcards.domain.interfaces import ReviewStateStore
from defcards.domain.models import FileKind, Grade, ReviewState

logger = logging.getLogger(__name__)


class FlashcardService:
    """
    Application service for studying atomic definitions as flashcards.

    Depends on the ReviewStateStore abstraction, not on where state is kept.
    """

    def __init__(
        self,
        index: DefinitionIndex,
        review_store: ReviewStateStore,
        counter: SessionCounter,
        config: FlashcardConfig,
    ):
        self.index = index
        self.review_store = review_store
        self.counter = counter
        self.config = config

    def card_states(self, now: int | None = None) -> list[ReviewState]:
        """
        One state per atomic file in scope.

        Files that were never graded get a synthesized new card; a missing
        state is not an error.
        """
        now = now_ms() if now is None else now
        refs = [
            ref for ref in self.index.atomic_files() if in_study_scope(ref, self.config.study_scope)
        ]
        stored = self.review_store.load_all(refs)

        states = []
        for ref in refs:
            records = self.index.records_for(ref)
            if not records:
                continue
            states.append(stored.get(ref) or create_new(records[0].key, ref, now))
        return states

    def today_queue(self, now: int | None = None, today: date | None = None) -> QueueBuildResult:
        now = now_ms() if now is None else now
        result = build_today_queue(
            self.card_states(now),
            self.counter.today_session(today),
            self.config,
            now=now,
            index=self.index,
        )
        logger.info(
            f"[study] Today's queue: {result.review_count} review + {result.new_count} new"
        )
        return result

    def extra_queue(
        self, rng: random.Random | None = None, now: int | None = None
    ) -> list[ReviewState]:
        refs = self.index.atomic_files()
        stored = self.review_store.load_all(refs)
        return build_extra_session_queue(self.index, stored, self.config, rng=rng, now=now)

    def resolve(self, term: str) -> tuple[str, str]:
        """
        Map a term (word or alias) to its (term_key, file_ref).

        Raises:
            UnknownTermError: No such term, or the term lives in a
                consolidated file and is not scheduled.
        """
        record = self.index.lookup(term)
        if record is None:
            raise UnknownTermError(term)
        if record.file_kind is not FileKind.ATOMIC:
            raise UnknownTermError(term, "only atomic definitions are studied as flashcards")
        return record.key, record.source_file

    def grade(
        self,
        term: str,
        grade: Grade | int | str,
        now: int | None = None,
        today: date | None = None,
        elapsed_seconds: int = 0,
    ) -> ReviewState:
        """
        Record a review of ``term``.

        Loads (or creates) the card's state, applies the scheduler, persists
        the result and counts it against today's session.

        Raises:
            UnknownTermError: The term cannot be resolved; callers should skip
                the card and carry on with the session.
        """
        grade = Grade.parse(grade)
        term_key, file_ref = self.resolve(term)
        now = now_ms() if now is None else now

        state = self.review_store.get(file_ref) or create_new(term_key, file_ref, now)
        was_new = state.is_new

        updated = update(state, grade, now)
        self.review_store.put(updated)
        self.counter.record_outcome(was_new, today=today, elapsed_seconds=elapsed_seconds)

        logger.info(
            f"[study] {term_key}: {grade.name.lower()} -> {updated.status.value}, "
            f"next in {updated.interval}d"
        )
        return updated
