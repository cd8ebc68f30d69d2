"""
Header extraction for definition files.

A file's frontmatter can be read from two places: the file store's header
cache, which is cheap but may lag behind an edit, or the raw text itself.
Both sit behind the ``HeaderExtractor`` interface and
``select_header_extractor`` picks whichever is usable.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import yaml  # type: ignore

from defcards.application.utils.text import (
    FRONTMATTER_DELIMITER,
    load_frontmatter_yaml,
    split_frontmatter,
)
from defcards.domain.constants import ALIASES_KEY
from defcards.domain.interfaces import CachedHeader

logger = logging.getLogger(__name__)

_KEY_VALUE_RE = re.compile(r"^([A-Za-z0-9_][\w\- ]*?)\s*:\s*(.*?)\s*$")
_LIST_ITEM_RE = re.compile(r"^\s*-\s*(.+?)\s*$")


@dataclass(frozen=True)
class HeaderInfo:
    """Frontmatter fields of one file plus the offset where its body starts."""

    fields: dict[str, Any] = field(default_factory=dict)
    body_offset: int = 0

    def get(self, key: str) -> Any:
        """Case-insensitive field lookup."""
        if key in self.fields:
            return self.fields[key]
        folded = key.lower()
        for k, v in self.fields.items():
            if isinstance(k, str) and k.strip().lower() == folded:
                return v
        return None

    def aliases(self) -> list[str]:
        """The ``aliases`` field as a list of strings."""
        raw = self.get(ALIASES_KEY)
        if raw is None:
            return []
        if isinstance(raw, str):
            return [a.strip() for a in raw.split(",") if a.strip()]
        if isinstance(raw, (list, tuple)):
            return [str(a).strip() for a in raw if a is not None and str(a).strip()]
        return []


class HeaderExtractor(ABC):
    @abstractmethod
    def extract(self, raw_text: str) -> HeaderInfo | None:
        """Return the header of ``raw_text``, or None when it has none."""


class CachedHeaderExtractor(HeaderExtractor):
    """Serves header fields from a file store's cache."""

    def __init__(self, cached: CachedHeader):
        self.cached = cached

    @staticmethod
    def is_usable(cached: CachedHeader | None, raw_text: str) -> bool:
        """
        A cache entry is usable only if it has located the header block and
        that location still fits the text. Anything else means the cache has
        not caught up with the latest save.
        """
        if cached is None or cached.body_offset is None:
            return False
        if not 0 < cached.body_offset <= len(raw_text):
            return False
        first_line = raw_text.lstrip("\ufeff").split("\n", 1)[0]
        if first_line.strip() != FRONTMATTER_DELIMITER:
            return False
        closing = raw_text[: cached.body_offset].rstrip("\r\n").rsplit("\n", 1)[-1]
        return closing.strip() == FRONTMATTER_DELIMITER

    def extract(self, raw_text: str) -> HeaderInfo | None:
        offset = self.cached.body_offset or 0
        return HeaderInfo(fields=dict(self.cached.fields), body_offset=offset)


class RawHeaderExtractor(HeaderExtractor):
    """
    Reads the header straight from raw text.

    YAML is tried first; when the block does not parse (a file caught
    mid-edit) a minimal line scanner recovers ``key: value`` pairs and the
    ``aliases`` list so indexing is never blocked by a typo.
    """

    def extract(self, raw_text: str) -> HeaderInfo | None:
        split = split_frontmatter(raw_text)
        if split is None:
            return None
        raw, body_offset = split

        try:
            fields = load_frontmatter_yaml(raw)
        except yaml.YAMLError as e:
            logger.debug(f"[header] YAML failed, using line scanner: {e}")
            fields = scan_header_lines(raw)
            if not fields:
                # Two divider lines around prose, not a header
                return None

        return HeaderInfo(fields=fields, body_offset=body_offset)


def scan_header_lines(raw: str) -> dict[str, Any]:
    """Best-effort ``key: value`` scan of a frontmatter block.

    Handles both inline (``aliases: a, b``) and nested list aliases::

        aliases:
          - a
          - b
    """
    fields: dict[str, Any] = {}
    aliases: list[str] | None = None
    in_aliases = False

    for line in raw.splitlines():
        if in_aliases:
            item = _LIST_ITEM_RE.match(line)
            if item:
                aliases.append(item.group(1).strip("'\""))  # type: ignore[union-attr]
                continue
            if line.strip():
                in_aliases = False

        m = _KEY_VALUE_RE.match(line)
        if not m:
            continue
        key, value = m.group(1).strip(), m.group(2)

        if key.lower() == ALIASES_KEY:
            aliases = [] if aliases is None else aliases
            value = value.strip("[]")
            aliases.extend(a.strip().strip("'\"") for a in value.split(",") if a.strip())
            in_aliases = True
            continue

        fields.setdefault(key, value.strip("'\""))

    if aliases is not None:
        fields[ALIASES_KEY] = [a for a in aliases if a]
    return fields


def select_header_extractor(raw_text: str, cached: CachedHeader | None) -> HeaderExtractor:
    if cached is not None and CachedHeaderExtractor.is_usable(cached, raw_text):
        return CachedHeaderExtractor(cached)
    return RawHeaderExtractor()


def extract_header(raw_text: str, cached: CachedHeader | None = None) -> HeaderInfo | None:
    return select_header_extractor(raw_text, cached).extract(raw_text)
