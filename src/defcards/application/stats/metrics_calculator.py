"""
Metrics calculator for study statistics.

This is a pure computation module with no I/O. "Today" is always passed in.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from defcards.application.utils.common import parse_day, round_half_up, round_int
from defcards.domain.constants import RECENT_SESSION_WINDOW, WEEK_DAYS
from defcards.domain.models import CardStatus, ReviewState, SessionRecord, StudyStats


def _dated(sessions: Iterable[SessionRecord]) -> list[tuple[date, SessionRecord]]:
    out = []
    for s in sessions:
        d = parse_day(s.date)
        if d is not None:
            out.append((d, s))
    return sorted(out, key=lambda pair: pair[0])


class MetricsCalculator:
    """
    Derives streaks, averages and accuracy from session history and card states.

    Stateless and side-effect free.
    """

    def weekly_average(self, sessions: Iterable[SessionRecord], today: date) -> float:
        """Mean cards studied per day over the 7 days ending today, to 1 decimal."""
        start = today - timedelta(days=WEEK_DAYS - 1)
        total = sum(s.total_studied for d, s in _dated(sessions) if start <= d <= today)
        return round_half_up(total / WEEK_DAYS, 1)

    def monthly_total(self, sessions: Iterable[SessionRecord], today: date) -> int:
        """Cards studied in today's calendar month."""
        return sum(
            s.total_studied
            for d, s in _dated(sessions)
            if d.year == today.year and d.month == today.month
        )

    def current_streak(self, sessions: Iterable[SessionRecord], today: date) -> int:
        """
        Consecutive active days ending today.

        Walks back from today; stops at the first day with no record or no
        cards studied. A streak not yet extended today counts as 0.
        """
        by_day = {d: s for d, s in _dated(sessions)}
        streak = 0
        day = today
        while True:
            session = by_day.get(day)
            if session is None or session.total_studied <= 0:
                break
            streak += 1
            day -= timedelta(days=1)
        return streak

    def longest_streak(self, sessions: Iterable[SessionRecord]) -> int:
        """Longest run of consecutive active days anywhere in the history."""
        longest = 0
        run = 0
        last_active: date | None = None

        for d, s in _dated(sessions):
            if s.total_studied <= 0:
                run = 0
                last_active = None
                continue
            if last_active is not None and (d - last_active).days == 1:
                run += 1
            else:
                run = 1
            last_active = d
            longest = max(longest, run)

        return longest

    def total_study_minutes(self, sessions: Iterable[SessionRecord]) -> int:
        return round_int(sum(s.total_time_seconds for s in sessions) / 60)

    def average_accuracy(self, states: Iterable[ReviewState]) -> float:
        """Mean of correct/total over cards reviewed at least once, to 2 decimals."""
        rates = [s.correct_reviews / s.total_reviews for s in states if s.total_reviews > 0]
        if not rates:
            return 0.0
        return round_half_up(sum(rates) / len(rates), 2)

    def status_counts(self, states: Iterable[ReviewState]) -> dict[CardStatus, int]:
        counts = {status: 0 for status in CardStatus}
        for s in states:
            counts[s.status] += 1
        return counts

    def compute(
        self,
        sessions: Iterable[SessionRecord],
        states: Iterable[ReviewState],
        today: date,
    ) -> StudyStats:
        sessions = [s for _, s in _dated(sessions)]
        states = list(states)
        counts = self.status_counts(states)
        today_key = today.isoformat()
        today_session = next((s for s in sessions if s.date == today_key), None)

        return StudyStats(
            total_cards=len(states),
            new_cards=counts[CardStatus.NEW],
            learning_cards=counts[CardStatus.LEARNING],
            review_cards=counts[CardStatus.REVIEW],
            graduated_cards=counts[CardStatus.GRADUATED],
            today_new_cards=today_session.new_cards_studied if today_session else 0,
            today_review_cards=today_session.review_cards_studied if today_session else 0,
            weekly_average=self.weekly_average(sessions, today),
            monthly_total=self.monthly_total(sessions, today),
            current_streak=self.current_streak(sessions, today),
            longest_streak=self.longest_streak(sessions),
            total_study_minutes=self.total_study_minutes(sessions),
            average_accuracy=self.average_accuracy(states),
            recent_sessions=sessions[-RECENT_SESSION_WINDOW:],
        )
