# Definition File Parsing
from .classifier import classify_file_kind
from .file_parser import FileRecordParser
from .header import (
    CachedHeaderExtractor,
    HeaderExtractor,
    HeaderInfo,
    RawHeaderExtractor,
    extract_header,
    select_header_extractor,
)

__all__ = [
    "FileRecordParser",
    "classify_file_kind",
    "HeaderExtractor",
    "HeaderInfo",
    "CachedHeaderExtractor",
    "RawHeaderExtractor",
    "extract_header",
    "select_header_extractor",
]
