"""Decides whether a file holds one term (atomic) or many (consolidated)."""

from defcards.domain.constants import DEF_TYPE_KEY
from defcards.domain.interfaces import CachedHeader
from defcards.domain.models import FileKind

from .header import HeaderInfo


def classify_file_kind(
    cached: CachedHeader | None,
    header: HeaderInfo | None,
    default: FileKind | None,
) -> FileKind | None:
    """
    Resolve the ``def-type`` of a file.

    Order: a valid value in the header cache, then the header read from the
    raw text (key and value case-insensitive), then ``default``. Returns None
    when nothing applies, meaning the file is not a definition source.
    """
    if cached is not None:
        kind = FileKind.parse(cached.fields.get(DEF_TYPE_KEY))
        if kind is not None:
            return kind

    if header is not None:
        kind = FileKind.parse(header.get(DEF_TYPE_KEY))
        if kind is not None:
            return kind

    return default
