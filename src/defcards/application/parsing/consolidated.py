"""
Parser for consolidated definition files: many terms in one file.

The body is split on divider lines. Each segment looks like::

    # Term
    *alias one, alias two*

    Definition text, any markdown.

The alias line is optional. Segments without a heading are skipped.
"""

import logging
import re

from defcards.application.config import ParseConfig
from defcards.application.utils.plural import calculate_plurals
from defcards.domain.models import DefinitionRecord, FileKind

from .header import HeaderInfo

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_ALIAS_LINE_RE = re.compile(r"^\s*([*_])(?![*_])(.+?)(?<![*_])\1\s*$")
_FENCE_RE = re.compile(r"^\s{0,3}(```|~~~)")


def split_segments(body: str, dividers: tuple[str, ...]) -> list[list[str]]:
    """Split ``body`` into line groups on lines consisting only of a divider.

    Divider lines inside fenced code blocks do not split.
    """
    segments: list[list[str]] = [[]]
    fence: str | None = None

    for line in body.splitlines():
        m = _FENCE_RE.match(line)
        if m:
            if fence is None:
                fence = m.group(1)
            elif fence == m.group(1):
                fence = None
        if fence is None and line.strip() in dividers:
            segments.append([])
            continue
        segments[-1].append(line)

    return [s for s in segments if any(line.strip() for line in s)]


def _parse_segment(
    lines: list[str], path: str, config: ParseConfig
) -> DefinitionRecord | None:
    idx = 0
    while idx < len(lines) and not lines[idx].strip():
        idx += 1

    heading = _HEADING_RE.match(lines[idx]) if idx < len(lines) else None
    if heading is None:
        return None
    word = heading.group(1).strip()
    idx += 1

    while idx < len(lines) and not lines[idx].strip():
        idx += 1

    aliases: list[str] = []
    if idx < len(lines):
        alias_match = _ALIAS_LINE_RE.match(lines[idx])
        if alias_match:
            aliases = [a.strip() for a in alias_match.group(2).split(",") if a.strip()]
            idx += 1

    body = "\n".join(lines[idx:]).strip()

    if config.auto_plurals:
        aliases += calculate_plurals([word] + aliases)

    return DefinitionRecord.create(
        word=word,
        body=body,
        source_file=path,
        file_kind=FileKind.CONSOLIDATED,
        aliases=aliases,
        link_target=f"{path}#{word}",
    )


def parse_consolidated(
    path: str,
    raw_text: str,
    header: HeaderInfo | None,
    config: ParseConfig,
) -> list[DefinitionRecord]:
    # An empty header block reads the same as two dividers
    body = raw_text[header.body_offset :] if header is not None and header.fields else raw_text

    records: list[DefinitionRecord] = []
    for n, segment in enumerate(split_segments(body, config.divider.tokens), start=1):
        record = _parse_segment(segment, path, config)
        if record is None:
            logger.debug(f"[parse] {path}: segment {n} has no heading, skipped")
            continue
        records.append(record)
    return records
