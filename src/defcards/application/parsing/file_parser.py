"""
Entry point for turning a definition file into DefinitionRecords.

Parsing never raises on malformed content: source files are user-edited
prose, so the worst case is "fewer records", never "indexing stopped".
"""

import logging

from defcards.application.config import ParseConfig
from defcards.domain.interfaces import CachedHeader
from defcards.domain.models import DefinitionRecord, FileKind

from .atomic import parse_atomic
from .classifier import classify_file_kind
from .consolidated import parse_consolidated
from .header import extract_header

logger = logging.getLogger(__name__)


class FileRecordParser:
    def __init__(self, config: ParseConfig | None = None):
        self.config = config or ParseConfig()

    def classify(self, raw_text: str, cached: CachedHeader | None = None) -> FileKind | None:
        header = extract_header(raw_text, cached)
        return classify_file_kind(cached, header, self.config.default_file_kind)

    def parse(
        self,
        path: str,
        raw_text: str,
        cached: CachedHeader | None = None,
    ) -> list[DefinitionRecord]:
        """
        Parse one file.

        Args:
            path: Vault-relative path of the file.
            raw_text: Current file contents.
            cached: The store's cached header, possibly stale.

        Returns:
            Zero or more records. Empty when the file is not a definition
            source or nothing in it could be parsed.
        """
        try:
            header = extract_header(raw_text, cached)
            kind = classify_file_kind(cached, header, self.config.default_file_kind)

            if kind is FileKind.ATOMIC:
                records = parse_atomic(path, raw_text, header, self.config)
            elif kind is FileKind.CONSOLIDATED:
                records = parse_consolidated(path, raw_text, header, self.config)
            else:
                logger.debug(f"[parse] {path}: no def-type and no default, skipped")
                return []
        except Exception as e:
            logger.warning(f"[parse] {path}: could not parse ({e}), skipped")
            return []

        logger.debug(f"[parse] {path}: {kind.value} -> {len(records)} record(s)")
        return records
