"""
Vault File Store — Infrastructure adapter for definition files on disk.

Implements FileStore over the markdown files below a definitions folder
inside a vault. File refs are POSIX paths relative to the vault root, so
they double as link targets and study-scope paths.
"""

import logging
from pathlib import Path, PurePosixPath

from defcards.application.parsing.header import RawHeaderExtractor
from defcards.application.utils.fs import iter_markdown_files
from defcards.domain.interfaces import CachedHeader, FileEvent, FileListener, FileStore

logger = logging.getLogger(__name__)

_StatKey = tuple[float, int]


class VaultFileStore(FileStore):
    """
    Markdown definition files under ``root/folder``, addressed by vault path.

    Keeps a header cache keyed by (mtime, size): an entry is reused until the
    file's stat changes. ``poll()`` diffs file stats since the previous poll
    and notifies subscribers, standing in for an editor's change events.
    """

    def __init__(self, root: Path, folder: str = ""):
        self.root = root
        self.folder = PurePosixPath(folder.strip("/")) if folder.strip("/") else None
        self._header_cache: dict[str, tuple[_StatKey, CachedHeader | None]] = {}
        self._listeners: list[FileListener] = []
        self._known: dict[str, _StatKey] = {}
        self._extractor = RawHeaderExtractor()

    def path_for(self, ref: str) -> Path:
        rel = PurePosixPath(ref)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"File ref escapes the vault: {ref}")
        return self.root.joinpath(*rel.parts)

    def ref_for(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    @property
    def scan_root(self) -> Path:
        return self.root.joinpath(*self.folder.parts) if self.folder else self.root

    def in_folder(self, ref: str) -> bool:
        return self.folder is None or self.folder in PurePosixPath(ref).parents

    def iter_files(self):
        for p in iter_markdown_files(self.scan_root):
            yield self.ref_for(p)

    def read_text(self, ref: str) -> str:
        return self.path_for(ref).read_text(encoding="utf-8")

    def write_text(self, ref: str, text: str) -> None:
        path = self.path_for(ref)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        self._header_cache.pop(ref, None)

    def exists(self, ref: str) -> bool:
        try:
            return self.in_folder(ref) and self.path_for(ref).is_file()
        except ValueError:
            return False

    def _stat(self, ref: str) -> _StatKey | None:
        try:
            st = self.path_for(ref).stat()
        except (OSError, ValueError):
            return None
        return (st.st_mtime, st.st_size)

    def cached_header(self, ref: str) -> CachedHeader | None:
        stat = self._stat(ref)
        if stat is None:
            self._header_cache.pop(ref, None)
            return None

        hit = self._header_cache.get(ref)
        if hit is not None and hit[0] == stat:
            return hit[1]

        try:
            text = self.read_text(ref)
        except OSError as e:
            logger.warning(f"[vault] Could not read {ref}: {e}")
            return None

        info = self._extractor.extract(text)
        header = None if info is None else CachedHeader(info.fields, info.body_offset)
        self._header_cache[ref] = (stat, header)
        return header

    def invalidate(self, ref: str | None = None) -> None:
        if ref is None:
            self._header_cache.clear()
        else:
            self._header_cache.pop(ref, None)

    def subscribe(self, listener: FileListener) -> None:
        self._listeners.append(listener)

    def notify(self, ref: str, event: FileEvent) -> None:
        for listener in list(self._listeners):
            listener(ref, event)

    def poll(self) -> list[tuple[str, FileEvent]]:
        """
        Report files added, changed or removed since the last poll.

        The first poll reports every file as modified.
        """
        current: dict[str, _StatKey] = {}
        for ref in self.iter_files():
            stat = self._stat(ref)
            if stat is not None:
                current[ref] = stat

        changes: list[tuple[str, FileEvent]] = []
        for ref, stat in current.items():
            if self._known.get(ref) != stat:
                changes.append((ref, FileEvent.MODIFIED))
        for ref in self._known:
            if ref not in current:
                changes.append((ref, FileEvent.DELETED))

        self._known = current
        for ref, event in changes:
            if event is FileEvent.DELETED:
                self._header_cache.pop(ref, None)
            logger.debug(f"[vault] {event.value}: {ref}")
            self.notify(ref, event)
        return changes
