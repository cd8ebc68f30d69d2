"""Parser for atomic definition files: the whole file is one term."""

from pathlib import PurePosixPath

from defcards.application.config import ParseConfig
from defcards.application.utils.plural import calculate_plurals
from defcards.domain.models import DefinitionRecord, FileKind

from .header import HeaderInfo


def term_from_path(path: str) -> str:
    """The term an atomic file defines: its file name without extension."""
    return PurePosixPath(path).stem


def parse_atomic(
    path: str,
    raw_text: str,
    header: HeaderInfo | None,
    config: ParseConfig,
) -> list[DefinitionRecord]:
    word = term_from_path(path).strip()
    if not word:
        return []

    aliases: list[str] = []
    body = raw_text
    if header is not None:
        aliases = header.aliases()
        body = raw_text[header.body_offset :]

    if config.auto_plurals:
        aliases += calculate_plurals([word] + aliases)

    return [
        DefinitionRecord.create(
            word=word,
            body=body,
            source_file=path,
            file_kind=FileKind.ATOMIC,
            aliases=aliases,
            link_target=path,
        )
    ]
