"""
In-memory index of every definition in the vault.

Records are grouped in per-file buckets. Readers work against an immutable
snapshot of (buckets, key map); writers build a new snapshot and publish it
with a single assignment, so a lookup running while a file is re-indexed
sees either the old records of that file or the new ones, never a mix.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from defcards.application.parsing import FileRecordParser
from defcards.application.utils.text import phrase_pattern
from defcards.domain.interfaces import FileEvent, FileStore
from defcards.domain.models import DefinitionRecord, FileKind

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    return key.strip().lower()


@dataclass(frozen=True)
class _Snapshot:
    # Insertion order is indexing order; later buckets win key collisions.
    buckets: dict[str, tuple[DefinitionRecord, ...]] = field(default_factory=dict)
    keys: dict[str, DefinitionRecord] = field(default_factory=dict)
    owners: dict[str, tuple[str, ...]] = field(default_factory=dict)


def _build_key_map(
    buckets: dict[str, tuple[DefinitionRecord, ...]],
) -> tuple[dict[str, DefinitionRecord], dict[str, tuple[str, ...]]]:
    keys: dict[str, DefinitionRecord] = {}
    owners: dict[str, list[str]] = {}
    for file_ref, records in buckets.items():
        for record in records:
            for key in record.lookup_keys:
                keys[key] = record
                files = owners.setdefault(key, [])
                if file_ref not in files:
                    files.append(file_ref)
    return keys, {k: tuple(v) for k, v in owners.items()}


class DefinitionIndex:
    """
    Maps lookup keys (words and aliases, lowercased) to DefinitionRecords.

    When two files claim the same key the most recently indexed file wins;
    ``conflicts()`` reports such keys.
    """

    def __init__(self, store: FileStore, parser: FileRecordParser | None = None):
        self.store = store
        self.parser = parser or FileRecordParser()
        self._snapshot = _Snapshot()
        self._write_lock = threading.Lock()

    # ---------- Write path ----------

    def rebuild_all(self, files: Iterable[str] | None = None) -> int:
        """Clear the index and re-parse every file. Returns the record count."""
        refs = list(self.store.iter_files() if files is None else files)
        buckets: dict[str, tuple[DefinitionRecord, ...]] = {}
        for ref in refs:
            records = self._parse_file(ref)
            if records:
                buckets[ref] = records

        with self._write_lock:
            self._publish(buckets)

        total = sum(len(r) for r in buckets.values())
        logger.info(f"[index] Rebuilt: {len(buckets)} file(s), {total} definition(s)")
        return total

    def reindex_one(self, file_ref: str) -> list[DefinitionRecord]:
        """Re-parse one file and swap in its records.

        A file that no longer exists, or no longer yields any records, is
        dropped from the index.
        """
        records = self._parse_file(file_ref) if self.store.exists(file_ref) else ()

        with self._write_lock:
            buckets = dict(self._snapshot.buckets)
            buckets.pop(file_ref, None)
            if records:
                buckets[file_ref] = records
            self._publish(buckets, touched=[file_ref])

        logger.debug(f"[index] Reindexed {file_ref}: {len(records)} definition(s)")
        return list(records)

    def remove(self, file_ref: str) -> None:
        with self._write_lock:
            if file_ref not in self._snapshot.buckets:
                return
            buckets = dict(self._snapshot.buckets)
            del buckets[file_ref]
            self._publish(buckets, touched=())
        logger.debug(f"[index] Removed {file_ref}")

    def attach(self, store: FileStore | None = None) -> None:
        """Keep the index current from a store's change notifications."""
        (store or self.store).subscribe(self._on_file_event)

    def _on_file_event(self, file_ref: str, event: FileEvent) -> None:
        if event is FileEvent.DELETED:
            self.remove(file_ref)
        else:
            self.reindex_one(file_ref)

    def _parse_file(self, file_ref: str) -> tuple[DefinitionRecord, ...]:
        try:
            text = self.store.read_text(file_ref)
        except OSError as e:
            logger.warning(f"[index] Could not read {file_ref}: {e}")
            return ()
        cached = self.store.cached_header(file_ref)
        return tuple(self.parser.parse(file_ref, text, cached))

    def _publish(
        self,
        buckets: dict[str, tuple[DefinitionRecord, ...]],
        touched: Iterable[str] | None = None,
    ) -> None:
        keys, owners = _build_key_map(buckets)
        touched_set = None if touched is None else set(touched)
        for key, files in owners.items():
            if len(files) < 2:
                continue
            if touched_set is None or touched_set.intersection(files):
                logger.warning(
                    f"[index] '{key}' is defined in {len(files)} files; using {files[-1]}"
                )
        self._snapshot = _Snapshot(buckets=buckets, keys=keys, owners=owners)

    # ---------- Read path ----------

    def lookup(self, key: str) -> DefinitionRecord | None:
        return self._snapshot.keys.get(normalize_key(key))

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None

    def __len__(self) -> int:
        return sum(len(r) for r in self._snapshot.buckets.values())

    def all_keys(self) -> frozenset[str]:
        return frozenset(self._snapshot.keys)

    def records(self) -> list[DefinitionRecord]:
        return [r for records in self._snapshot.buckets.values() for r in records]

    def records_for(self, file_ref: str) -> list[DefinitionRecord]:
        return list(self._snapshot.buckets.get(file_ref, ()))

    def files(self) -> list[str]:
        return list(self._snapshot.buckets)

    def file_kind(self, file_ref: str) -> FileKind | None:
        records = self._snapshot.buckets.get(file_ref)
        return records[0].file_kind if records else None

    def atomic_files(self) -> list[str]:
        return [
            ref
            for ref, records in self._snapshot.buckets.items()
            if records and records[0].file_kind is FileKind.ATOMIC
        ]

    def conflicts(self) -> dict[str, tuple[str, ...]]:
        """Keys claimed by more than one file, with the files in indexing order."""
        return {k: files for k, files in self._snapshot.owners.items() if len(files) > 1}

    def find_mentions(self, text: str) -> list[DefinitionRecord]:
        """Records whose word or alias occurs in ``text`` as a whole phrase.

        Longer phrases are matched first and claim their span, so "binary
        search tree" wins over "tree" inside it. Results are ordered by first
        occurrence.
        """
        snapshot = self._snapshot
        taken: list[tuple[int, int]] = []
        positions: dict[DefinitionRecord, int] = {}

        for key in sorted(snapshot.keys, key=lambda k: (-len(k), k)):
            for m in phrase_pattern(key).finditer(text):
                start, end = m.span()
                if any(start < t_end and t_start < end for t_start, t_end in taken):
                    continue
                taken.append((start, end))
                record = snapshot.keys[key]
                positions[record] = min(start, positions.get(record, start))

        return sorted(positions, key=positions.__getitem__)
