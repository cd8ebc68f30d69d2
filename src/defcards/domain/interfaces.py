"""
Ports (interfaces) for the environment the core runs in.

Application services depend on these abstractions, not on concrete adapters.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .models import ReviewState, SessionRecord


class FileEvent(str, Enum):
    MODIFIED = "modified"  # created or changed
    DELETED = "deleted"


FileListener = Callable[[str, FileEvent], None]


@dataclass(frozen=True)
class CachedHeader:
    """
    A file store's best-effort extraction of a file's frontmatter.

    Attributes:
        fields: Parsed frontmatter mapping.
        body_offset: Character offset where the body starts, or None when the
            cache has not located the header block yet.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)
    body_offset: int | None = None


class FileStore(ABC):
    """
    Port for the document store holding definition files.

    Implementations:
        - VaultFileStore: Markdown files under a folder on disk.
    """

    @abstractmethod
    def iter_files(self) -> Iterator[str]:
        """Yield the refs of every file in scope."""

    @abstractmethod
    def read_text(self, ref: str) -> str:
        """Return the raw text of a file. Raises OSError if unreadable."""

    @abstractmethod
    def cached_header(self, ref: str) -> CachedHeader | None:
        """Return the cached header extraction for a file. May be stale."""

    @abstractmethod
    def exists(self, ref: str) -> bool:
        pass

    @abstractmethod
    def subscribe(self, listener: FileListener) -> None:
        """Register a callback invoked for every file change."""


class ReviewStateStore(ABC):
    """
    Port for persisting per-card review state.

    Implementations:
        - FrontmatterReviewStore: State kept inside the owning file.
    """

    @abstractmethod
    def get(self, file_ref: str) -> ReviewState | None:
        """Return the stored state for a card, or None if it was never graded."""

    @abstractmethod
    def put(self, state: ReviewState) -> None:
        pass

    def load_all(self, file_refs: Iterable[str]) -> dict[str, ReviewState]:
        """Load every stored state among ``file_refs``, keyed by file ref."""
        states: dict[str, ReviewState] = {}
        for ref in file_refs:
            state = self.get(ref)
            if state is not None:
                states[ref] = state
        return states


class SessionStore(ABC):
    """
    Port for persisting the per-day session history.

    Implementations:
        - JsonSessionStore: A JSON list on disk.
    """

    @abstractmethod
    def load(self) -> list[SessionRecord]:
        pass

    @abstractmethod
    def save(self, records: list[SessionRecord]) -> None:
        """Merge ``records`` into the persisted history."""
