"""
Domain models for definitions and flashcard scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, IntEnum


class FileKind(str, Enum):
    """How a definition file lays out its terms."""

    ATOMIC = "atomic"  # one term per file
    CONSOLIDATED = "consolidated"  # many terms, divided into segments

    @classmethod
    def parse(cls, value: object) -> "FileKind | None":
        """Return the kind named by ``value`` (case-insensitive), or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        raw = value.strip().strip("'\"").lower()
        for kind in cls:
            if kind.value == raw:
                return kind
        return None


def _clean_aliases(word: str, aliases: Iterable[str]) -> tuple[str, ...]:
    seen = {word.strip().lower()}
    out: list[str] = []
    for alias in aliases:
        if not isinstance(alias, str):
            alias = str(alias)
        alias = alias.strip()
        if not alias:
            continue
        folded = alias.lower()
        if folded in seen:
            continue
        seen.add(folded)
        out.append(alias)
    return tuple(out)


@dataclass(frozen=True)
class DefinitionRecord:
    """
    A single defined term parsed out of a definition file.

    Attributes:
        key: Lowercased word; the primary lookup identity.
        word: Display form of the term as authored.
        aliases: Alternate spellings and derived plurals, without duplicates.
        body: Definition text with any frontmatter sliced off.
        source_file: Vault-relative path of the file the record came from.
        file_kind: Layout of the source file.
        link_target: Where to navigate to see the definition in its file.
    """

    key: str
    word: str
    aliases: tuple[str, ...]
    body: str
    source_file: str
    file_kind: FileKind
    link_target: str

    @classmethod
    def create(
        cls,
        word: str,
        body: str,
        source_file: str,
        file_kind: FileKind,
        aliases: Iterable[str] = (),
        link_target: str | None = None,
    ) -> "DefinitionRecord":
        word = word.strip()
        return cls(
            key=word.lower(),
            word=word,
            aliases=_clean_aliases(word, aliases),
            body=body,
            source_file=source_file,
            file_kind=file_kind,
            link_target=link_target or source_file,
        )

    @property
    def lookup_keys(self) -> list[str]:
        """The key followed by every lowercased alias."""
        return [self.key] + [a.lower() for a in self.aliases]


class CardStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    GRADUATED = "graduated"


class Grade(IntEnum):
    """Self-assessed recall quality."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @classmethod
    def parse(cls, value: "str | int | Grade") -> "Grade":
        if isinstance(value, Grade):
            return value
        if isinstance(value, int):
            return cls(value)
        raw = str(value).strip()
        if raw.isdigit():
            return cls(int(raw))
        try:
            return cls[raw.upper()]
        except KeyError:
            raise ValueError(f"Unknown grade: {value!r}") from None


@dataclass(frozen=True)
class ReviewState:
    """
    Persisted learning state of one card.

    Timestamps are epoch milliseconds. Instances are immutable; the scheduler
    returns a new state for every review.
    """

    term_key: str
    file_ref: str
    status: CardStatus = CardStatus.NEW
    ease_factor: float = 2.5
    interval: int = 1  # days
    repetitions: int = 0  # consecutive passing reviews since last reset
    created_at: int = 0
    next_review_due_at: int | None = None
    last_reviewed_at: int | None = None
    total_reviews: int = 0
    correct_reviews: int = 0

    @property
    def is_new(self) -> bool:
        return self.status is CardStatus.NEW

    @property
    def accuracy(self) -> float | None:
        if self.total_reviews == 0:
            return None
        return self.correct_reviews / self.total_reviews


@dataclass
class SessionRecord:
    """Study counters for one calendar day (``YYYY-MM-DD``)."""

    date: str
    new_cards_studied: int = 0
    review_cards_studied: int = 0
    total_time_seconds: int = 0

    @property
    def total_studied(self) -> int:
        return self.new_cards_studied + self.review_cards_studied

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "new_cards_studied": self.new_cards_studied,
            "review_cards_studied": self.review_cards_studied,
            "total_time_seconds": self.total_time_seconds,
        }


@dataclass
class StudyStats:
    """Aggregate view over the session history and all card states."""

    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    graduated_cards: int = 0
    today_new_cards: int = 0
    today_review_cards: int = 0
    weekly_average: float = 0.0
    monthly_total: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_study_minutes: int = 0
    average_accuracy: float = 0.0
    recent_sessions: list[SessionRecord] = field(default_factory=list)
