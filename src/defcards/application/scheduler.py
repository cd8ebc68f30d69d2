"""
SM-2 scheduling for flashcards.

Pure functions over ReviewState: nothing here reads the clock unless ``now``
is omitted, and nothing is persisted. Callers store the returned state.

Status moves New -> Learning/Review -> Graduated; a failed review (Again)
resets the card to Learning from any status.
"""

import dataclasses
from collections.abc import Iterable

from defcards.application.utils.common import now_ms, round_int
from defcards.domain.constants import (
    DEFAULT_EASE_FACTOR,
    EASY_EASE_BONUS,
    EASY_FIRST_INTERVAL,
    GOOD_EASE_PENALTY,
    GOOD_FIRST_INTERVAL,
    GRADUATION_INTERVAL,
    GRADUATION_REPETITIONS,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_MULTIPLIER,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MS_PER_DAY,
    SECOND_INTERVAL,
    STATUS_PRIORITY,
)
from defcards.domain.models import CardStatus, Grade, ReviewState


def create_new(term_key: str, file_ref: str, now: int | None = None) -> ReviewState:
    """A fresh card, due immediately."""
    now = now_ms() if now is None else now
    return ReviewState(
        term_key=term_key,
        file_ref=file_ref,
        status=CardStatus.NEW,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=1,
        repetitions=0,
        created_at=now,
        next_review_due_at=now,
        last_reviewed_at=None,
        total_reviews=0,
        correct_reviews=0,
    )


def _passing_interval(repetitions: int, interval: int, ease: float, first: int) -> int:
    if repetitions == 1:
        return first
    if repetitions == 2:
        return SECOND_INTERVAL
    return round_int(interval * ease)


def _passing_status(repetitions: int, interval: int) -> CardStatus:
    if repetitions >= GRADUATION_REPETITIONS and interval >= GRADUATION_INTERVAL:
        return CardStatus.GRADUATED
    return CardStatus.REVIEW


def update(state: ReviewState, grade: Grade | int, now: int | None = None) -> ReviewState:
    """
    Apply one review to a card.

    Args:
        state: The card's current state.
        grade: Again, Hard, Good or Easy (0-3).
        now: Review time in epoch milliseconds; defaults to the current time.

    Returns:
        A new ReviewState with ``next_review_due_at == now + interval days``.
    """
    grade = Grade(grade)
    now = now_ms() if now is None else now

    ease = state.ease_factor
    interval = state.interval
    repetitions = state.repetitions

    if grade is Grade.AGAIN:
        repetitions = 0
        interval = 1
        status = CardStatus.LEARNING

    elif grade is Grade.HARD:
        ease = max(MIN_EASE_FACTOR, ease - HARD_EASE_PENALTY)
        if repetitions == 0:
            repetitions = 1
            interval = 1
        else:
            interval = max(1, round_int(interval * HARD_INTERVAL_MULTIPLIER))
        status = CardStatus.LEARNING

    elif grade is Grade.GOOD:
        repetitions += 1
        ease = max(MIN_EASE_FACTOR, ease - GOOD_EASE_PENALTY)
        interval = _passing_interval(repetitions, interval, ease, GOOD_FIRST_INTERVAL)
        status = _passing_status(repetitions, interval)

    else:  # Grade.EASY
        repetitions += 1
        ease = min(MAX_EASE_FACTOR, ease + EASY_EASE_BONUS)
        interval = _passing_interval(repetitions, interval, ease, EASY_FIRST_INTERVAL)
        status = _passing_status(repetitions, interval)

    # Persisted intervals from older files may be 0
    interval = max(1, interval)

    return dataclasses.replace(
        state,
        status=status,
        ease_factor=ease,
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=now,
        next_review_due_at=now + interval * MS_PER_DAY,
        total_reviews=state.total_reviews + 1,
        correct_reviews=state.correct_reviews + (1 if grade >= Grade.GOOD else 0),
    )


def is_due(state: ReviewState, now: int | None = None) -> bool:
    if state.next_review_due_at is None:
        return True
    now = now_ms() if now is None else now
    return state.next_review_due_at <= now


def priority(state: ReviewState, now: int | None = None) -> float:
    """
    Sort key for study order; lower comes first.

    Status dominates (New < Learning < Review < Graduated); within a status,
    each day overdue moves a card one unit earlier.
    """
    now = now_ms() if now is None else now
    overdue = 0
    if state.next_review_due_at is not None:
        overdue = max(0, now - state.next_review_due_at)
    return STATUS_PRIORITY[state.status.value] - overdue / MS_PER_DAY


def sort_by_priority(states: Iterable[ReviewState], now: int | None = None) -> list[ReviewState]:
    """Stable ascending sort by ``priority``; ties keep their input order."""
    now = now_ms() if now is None else now
    return sorted(states, key=lambda s: priority(s, now))
