"""Tests for SM-2 scheduling."""

import pytest

from defcards.application.scheduler import create_new, is_due, priority, sort_by_priority, update
from defcards.domain.constants import MS_PER_DAY
from defcards.domain.models import CardStatus, Grade, ReviewState

NOW = 1_700_000_000_000


def review(grades, state=None, start=NOW):
    state = state or create_new("term", "term.md", start)
    now = start
    for g in grades:
        state = update(state, g, now)
        now = state.next_review_due_at
    return state


def test_create_new_is_due_immediately():
    s = create_new("term", "term.md", NOW)
    assert s.status is CardStatus.NEW
    assert s.ease_factor == 2.5
    assert s.interval == 1
    assert s.repetitions == 0
    assert s.next_review_due_at == NOW
    assert is_due(s, NOW)


def test_good_three_times_from_new():
    intervals = []
    state = create_new("term", "term.md", NOW)
    for _ in range(3):
        state = update(state, Grade.GOOD, NOW)
        intervals.append(state.interval)

    assert intervals == [1, 6, 15]
    assert state.status is CardStatus.REVIEW
    assert state.ease_factor == pytest.approx(2.44)


def test_easy_repeatedly_graduates():
    intervals = []
    state = create_new("term", "term.md", NOW)
    for _ in range(4):
        state = update(state, Grade.EASY, NOW)
        intervals.append(state.interval)

    # Ease is already at its ceiling, so it never grows past 2.5
    assert intervals == [4, 6, 15, 38]
    assert state.ease_factor == 2.5
    assert state.status is CardStatus.GRADUATED


def test_again_resets_from_any_status():
    graduated = review([Grade.EASY] * 4)
    assert graduated.status is CardStatus.GRADUATED

    lapsed = update(graduated, Grade.AGAIN, NOW)
    assert lapsed.status is CardStatus.LEARNING
    assert lapsed.repetitions == 0
    assert lapsed.interval == 1
    assert lapsed.ease_factor == graduated.ease_factor


def test_hard_on_new_card():
    s = update(create_new("term", "term.md", NOW), Grade.HARD, NOW)
    assert s.status is CardStatus.LEARNING
    assert s.repetitions == 1
    assert s.interval == 1
    assert s.ease_factor == pytest.approx(2.35)


def test_hard_stretches_interval():
    state = ReviewState(
        term_key="t", file_ref="t.md", status=CardStatus.REVIEW, interval=10, repetitions=3
    )
    s = update(state, Grade.HARD, NOW)
    assert s.interval == 12
    assert s.repetitions == 3
    assert s.status is CardStatus.LEARNING


def test_ease_never_leaves_bounds():
    state = review([Grade.HARD] * 20)
    assert state.ease_factor == pytest.approx(1.3)
    state = review([Grade.EASY] * 20, state=state)
    assert state.ease_factor == pytest.approx(2.5)


@pytest.mark.parametrize("grade", list(Grade))
@pytest.mark.parametrize("history", [[Grade.GOOD, Grade.GOOD], [Grade.EASY] * 4, []])
def test_invariants_hold_for_every_grade(grade, history):
    before = review(history)
    after = update(before, grade, NOW)

    assert after.interval >= 1
    assert 1.3 <= after.ease_factor <= 2.5
    assert after.next_review_due_at == NOW + after.interval * MS_PER_DAY
    assert after.last_reviewed_at == NOW
    assert after.total_reviews == before.total_reviews + 1
    assert after.correct_reviews <= after.total_reviews
    expected_correct = 1 if grade >= Grade.GOOD else 0
    assert after.correct_reviews == before.correct_reviews + expected_correct
    if grade in (Grade.AGAIN, Grade.HARD):
        assert after.status is not CardStatus.GRADUATED
    if after.status is CardStatus.GRADUATED:
        assert after.repetitions >= 2
        assert after.interval >= 21


def test_update_returns_new_state():
    s = create_new("term", "term.md", NOW)
    updated = update(s, Grade.GOOD, NOW)
    assert s.status is CardStatus.NEW
    assert updated is not s


def test_zero_interval_from_old_data_is_clamped():
    state = ReviewState(
        term_key="t", file_ref="t.md", status=CardStatus.REVIEW, interval=0, repetitions=1
    )
    assert update(state, Grade.HARD, NOW).interval == 1


def test_is_due():
    s = review([Grade.GOOD])
    assert not is_due(s, NOW)
    assert is_due(s, NOW + MS_PER_DAY)
    assert is_due(ReviewState(term_key="t", file_ref="t.md", next_review_due_at=None), NOW)


def test_priority_orders_by_status_then_overdue():
    new = create_new("a", "a.md", NOW)
    learning = ReviewState("b", "b.md", CardStatus.LEARNING, next_review_due_at=NOW)
    overdue_review = ReviewState(
        "c", "c.md", CardStatus.REVIEW, next_review_due_at=NOW - 3 * MS_PER_DAY
    )
    review_due = ReviewState("d", "d.md", CardStatus.REVIEW, next_review_due_at=NOW)

    assert priority(new, NOW) == 1000
    assert priority(overdue_review, NOW) == pytest.approx(2997)

    ordered = sort_by_priority([review_due, overdue_review, learning, new], NOW)
    assert [s.term_key for s in ordered] == ["a", "b", "c", "d"]


def test_sort_by_priority_is_stable():
    cards = [ReviewState(k, f"{k}.md", CardStatus.REVIEW, next_review_due_at=NOW) for k in "xyz"]
    assert [s.term_key for s in sort_by_priority(cards, NOW)] == ["x", "y", "z"]
