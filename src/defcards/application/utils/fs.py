from collections.abc import Iterator
from pathlib import Path

from defcards.domain.constants import MARKDOWN_SUFFIX


def iter_markdown_files(root: Path) -> Iterator[Path]:
    """Yield markdown files under ``root`` in a stable order, skipping dot-directories."""
    if root.is_file():
        if root.suffix.lower() == MARKDOWN_SUFFIX:
            yield root
        return
    if not root.is_dir():
        return
    for p in sorted(root.rglob(f"*{MARKDOWN_SUFFIX}")):
        rel = p.relative_to(root)
        if any(part.startswith(".") for part in rel.parts):
            continue
        if p.is_file():
            yield p
