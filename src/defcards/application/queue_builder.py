"""
Queue builder for daily study sessions.

Builds ordered study queues by:
1. Filtering cards to atomic terms inside the configured study scope
2. Taking due review cards by priority, up to what is left of today's limit
3. Taking new cards oldest first, up to what is left of today's new-card cap

Reviews come before new cards. Once the caps are used up, an extra session
can be drawn from every in-scope card in random order.
"""

import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath

from defcards.application.config import FlashcardConfig
from defcards.application.definition_index import DefinitionIndex
from defcards.application.scheduler import create_new, is_due, sort_by_priority
from defcards.application.utils.common import now_ms
from defcards.domain.models import CardStatus, FileKind, ReviewState, SessionRecord

logger = logging.getLogger(__name__)


@dataclass
class QueueBuildResult:
    """Result of queue building operation."""

    queue: list[ReviewState]  # Review cards first, then new cards
    review_count: int
    new_count: int
    reviews_left: int  # Review allowance remaining today before this queue
    new_left: int  # New-card allowance remaining today before this queue

    @property
    def caps_exhausted(self) -> bool:
        return self.reviews_left == 0 and self.new_left == 0


def in_study_scope(path: str, scope: Iterable[str]) -> bool:
    """
    Whether ``path`` falls inside the study scope.

    An empty scope matches every path. Entries ending in "/" are folders;
    other entries match that exact file or, if the path lies below them,
    act as a folder too.
    """
    scope = [s for s in scope if s]
    if not scope:
        return True

    p = PurePosixPath(path)
    for entry in scope:
        if entry.endswith("/"):
            if path.startswith(entry):
                return True
            continue
        if path == entry:
            return True
        if PurePosixPath(entry) in p.parents:
            return True
    return False


def _is_eligible(state: ReviewState, scope: list[str], index: DefinitionIndex) -> bool:
    if index.file_kind(state.file_ref) is not FileKind.ATOMIC:
        return False
    return in_study_scope(state.file_ref, scope)


def build_today_queue(
    states: Iterable[ReviewState],
    session: SessionRecord,
    config: FlashcardConfig,
    index: DefinitionIndex,
    now: int | None = None,
) -> QueueBuildResult:
    """
    Build today's capped study queue.

    Args:
        states: Card states to choose from.
        session: Today's counters; what has been studied already is
            subtracted from the daily caps.
        config: Daily caps and study scope.
        index: Cards whose file is not an indexed atomic definition are
            dropped.
        now: Current time in epoch milliseconds.

    Returns:
        QueueBuildResult with due reviews (by priority) ahead of new cards
        (oldest first).
    """
    now = now_ms() if now is None else now
    eligible = [s for s in states if _is_eligible(s, config.study_scope, index)]

    reviews_left = max(0, config.daily_review_limit - session.review_cards_studied)
    new_left = max(0, config.daily_new_cards - session.new_cards_studied)

    due = [s for s in eligible if s.status is not CardStatus.NEW and is_due(s, now)]
    review_part = sort_by_priority(due, now)[:reviews_left]

    new = [s for s in eligible if s.status is CardStatus.NEW]
    new_part = sorted(new, key=lambda s: s.created_at)[:new_left]

    logger.debug(
        f"[queue] eligible={len(eligible)} due={len(due)} new={len(new)} "
        f"-> {len(review_part)} review + {len(new_part)} new"
    )

    return QueueBuildResult(
        queue=review_part + new_part,
        review_count=len(review_part),
        new_count=len(new_part),
        reviews_left=reviews_left,
        new_left=new_left,
    )


def build_extra_session_queue(
    index: DefinitionIndex,
    states: Mapping[str, ReviewState],
    config: FlashcardConfig,
    rng: random.Random | None = None,
    now: int | None = None,
) -> list[ReviewState]:
    """
    Build an uncapped practice queue for studying past the daily caps.

    Takes the first record of every atomic in-scope file regardless of
    status or due date, shuffles them and keeps at most
    ``config.extra_session_limit``.

    Args:
        index: Source of atomic definition files.
        states: Stored review states keyed by file ref; files without one
            get a new card.
        config: Study scope and the extra session ceiling.
        rng: Randomness source; pass a seeded ``random.Random`` for a
            reproducible order.
        now: Creation time for synthesized new cards.
    """
    rng = rng or random.Random()
    now = now_ms() if now is None else now

    cards: list[ReviewState] = []
    for file_ref in index.atomic_files():
        if not in_study_scope(file_ref, config.study_scope):
            continue
        records = index.records_for(file_ref)
        if not records:
            continue
        state = states.get(file_ref) or create_new(records[0].key, file_ref, now)
        cards.append(state)

    rng.shuffle(cards)
    return cards[: config.extra_session_limit]
