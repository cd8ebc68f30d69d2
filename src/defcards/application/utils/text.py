import re
from typing import Any

import yaml  # type: ignore
import yaml.constructor

from .yaml import _LiteralDumper

FRONTMATTER_DELIMITER = "---"

# ---------- Frontmatter helpers ----------


def _iter_lines(text: str, start: int = 0):
    """Yield (line_without_newline, end_offset) pairs, end_offset past the newline."""
    pos = start
    n = len(text)
    while pos < n:
        nl = text.find("\n", pos)
        end = n if nl == -1 else nl + 1
        yield text[pos:end].rstrip("\r\n"), end
        pos = end


def split_frontmatter(md_text: str) -> tuple[str, int] | None:
    """Locate the leading ``---`` block of a markdown document.

    Returns (yaml_content, body_offset) where body_offset is the character
    offset of the first line after the closing delimiter, or None when the
    document has no complete frontmatter block.
    Uses line-by-line scanning instead of regex for reliability.
    """
    start = 1 if md_text.startswith("\ufeff") else 0
    lines = _iter_lines(md_text, start)

    first = next(lines, None)
    if first is None or first[0].strip() != FRONTMATTER_DELIMITER:
        return None

    yaml_lines: list[str] = []
    for line, end in lines:
        if line.strip() == FRONTMATTER_DELIMITER:
            return "\n".join(yaml_lines), end
        yaml_lines.append(line)

    # No closing ---
    return None


class UniqueKeyLoader(yaml.SafeLoader):
    """Custom YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        mapping = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in mapping:
                raise yaml.constructor.ConstructorError(
                    None, None, f"found duplicate key '{key}'", key_node.start_mark
                )
            mapping.add(key)
        return super().construct_mapping(node, deep)


def load_frontmatter_yaml(raw: str) -> dict[str, Any]:
    """Parse a frontmatter block. Raises yaml.YAMLError on malformed input."""
    # Fix tabs (common user error)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")
    meta = yaml.load(raw, Loader=UniqueKeyLoader) or {}
    if not isinstance(meta, dict):
        raise yaml.constructor.ConstructorError(
            None, None, f"frontmatter is a {type(meta).__name__}, expected a mapping"
        )
    return meta


def parse_frontmatter(md_text: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from markdown text.

    Returns (meta, body). Without frontmatter, meta is empty and body is the
    whole text. When the YAML is broken, meta holds a single ``__yaml_error__``
    entry and body is the whole text.
    """
    split = split_frontmatter(md_text)
    if split is None:
        return {}, md_text

    raw, body_offset = split
    try:
        meta = load_frontmatter_yaml(raw)
    except yaml.YAMLError as e:
        return {"__yaml_error__": str(e)}, md_text

    return meta, md_text[body_offset:]


def scrub_internal_keys(d: Any) -> Any:
    """Recursively remove keys starting with __"""
    if isinstance(d, dict):
        return {
            k: scrub_internal_keys(v)
            for k, v in d.items()
            if not (isinstance(k, str) and k.startswith("__"))
        }
    elif isinstance(d, list):
        return [scrub_internal_keys(v) for v in d]
    return d


def rebuild_markdown_with_frontmatter(meta: dict[str, Any], body: str) -> str:
    clean_meta = scrub_internal_keys(meta)
    yaml_text = yaml.dump(
        clean_meta,
        Dumper=_LiteralDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10**9,
    )
    return f"---\n{yaml_text}---\n{body}"


# ---------- Term matching ----------


def phrase_pattern(phrase: str) -> re.Pattern:
    """Case-insensitive pattern matching ``phrase`` as a whole word or phrase.

    Internal whitespace matches any run of whitespace. Boundaries are only
    enforced next to word characters so that terms like "C++" still match.
    """
    parts = [re.escape(p) for p in phrase.split()]
    body = r"\s+".join(parts)
    left = r"(?<!\w)" if phrase[:1].isalnum() or phrase[:1] == "_" else ""
    right = r"(?!\w)" if phrase[-1:].isalnum() or phrase[-1:] == "_" else ""
    return re.compile(left + body + right, re.IGNORECASE)
