"""
Frontmatter Review Store — review state kept inside each atomic file.

A card's state lives under a ``flashcard:`` mapping in its own file's
frontmatter, so deleting or renaming the file takes the state with it.
"""

import logging
from typing import Any

from defcards.application.parsing.atomic import term_from_path
from defcards.application.utils.text import parse_frontmatter, rebuild_markdown_with_frontmatter
from defcards.domain.constants import (
    DEFAULT_EASE_FACTOR,
    FLASHCARD_KEY,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
)
from defcards.domain.errors import PersistenceError
from defcards.domain.interfaces import ReviewStateStore
from defcards.domain.models import CardStatus, ReviewState

from .vault_store import VaultFileStore

logger = logging.getLogger(__name__)

# Field name -> keys accepted when reading (first is the one written).
# The camelCase spellings are what the Obsidian plugin wrote.
_FIELD_KEYS = {
    "status": ("status",),
    "ease_factor": ("ease_factor", "easeFactor"),
    "interval": ("interval",),
    "repetitions": ("repetitions",),
    "next_review_due_at": ("next_review_due_at", "nextReviewDate"),
    "last_reviewed_at": ("last_reviewed_at", "lastReviewDate"),
    "created_at": ("created_at", "createdDate"),
    "total_reviews": ("total_reviews", "totalReviews"),
    "correct_reviews": ("correct_reviews", "correctReviews"),
}


def _read(data: dict[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in data:
            return data[key]
    return None


def _as_int(value: Any, default: int | None) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def state_from_frontmatter(data: dict[str, Any], file_ref: str, created_fallback: int) -> ReviewState:
    """Build a ReviewState from a ``flashcard:`` mapping, clamping bad values."""
    try:
        status = CardStatus(str(_read(data, "status") or "new").lower())
    except ValueError:
        status = CardStatus.NEW

    ease = _as_float(_read(data, "ease_factor"), DEFAULT_EASE_FACTOR)
    ease = min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, ease))

    total = max(0, _as_int(_read(data, "total_reviews"), 0) or 0)
    correct = min(total, max(0, _as_int(_read(data, "correct_reviews"), 0) or 0))

    # 0 in legacy files means "never reviewed"
    last_reviewed = _as_int(_read(data, "last_reviewed_at"), None) or None

    return ReviewState(
        term_key=term_from_path(file_ref).strip().lower(),
        file_ref=file_ref,
        status=status,
        ease_factor=ease,
        interval=max(1, _as_int(_read(data, "interval"), 1) or 1),
        repetitions=max(0, _as_int(_read(data, "repetitions"), 0) or 0),
        created_at=_as_int(_read(data, "created_at"), None) or created_fallback,
        next_review_due_at=_as_int(_read(data, "next_review_due_at"), None),
        last_reviewed_at=last_reviewed,
        total_reviews=total,
        correct_reviews=correct,
    )


def state_to_frontmatter(state: ReviewState) -> dict[str, Any]:
    data: dict[str, Any] = {
        "status": state.status.value,
        "ease_factor": round(state.ease_factor, 4),
        "interval": state.interval,
        "repetitions": state.repetitions,
        "next_review_due_at": state.next_review_due_at,
        "last_reviewed_at": state.last_reviewed_at,
        "created_at": state.created_at,
        "total_reviews": state.total_reviews,
        "correct_reviews": state.correct_reviews,
    }
    return {k: v for k, v in data.items() if v is not None}


class FrontmatterReviewStore(ReviewStateStore):
    def __init__(self, files: VaultFileStore):
        self.files = files

    def _created_fallback(self, file_ref: str) -> int:
        try:
            return int(self.files.path_for(file_ref).stat().st_ctime * 1000)
        except OSError:
            return 0

    def get(self, file_ref: str) -> ReviewState | None:
        try:
            text = self.files.read_text(file_ref)
        except OSError as e:
            logger.warning(f"[review] Could not read {file_ref}: {e}")
            return None

        meta, _ = parse_frontmatter(text)
        if "__yaml_error__" in meta:
            logger.debug(f"[review] {file_ref}: unreadable frontmatter, treating as new")
            return None

        data = meta.get(FLASHCARD_KEY)
        if not isinstance(data, dict):
            return None
        return state_from_frontmatter(data, file_ref, self._created_fallback(file_ref))

    def put(self, state: ReviewState) -> None:
        text = self.files.read_text(state.file_ref)
        meta, body = parse_frontmatter(text)
        if "__yaml_error__" in meta:
            raise PersistenceError(
                f"Refusing to rewrite {state.file_ref}: frontmatter does not parse "
                f"({meta['__yaml_error__']})"
            )

        meta[FLASHCARD_KEY] = state_to_frontmatter(state)
        new_text = rebuild_markdown_with_frontmatter(meta, body)
        try:
            self.files.write_text(state.file_ref, new_text)
        except OSError as e:
            logger.error(f"[review] Failed to write {state.file_ref}: {e}")
            raise
        logger.debug(f"[write] {state.file_ref}: persisted review state")
