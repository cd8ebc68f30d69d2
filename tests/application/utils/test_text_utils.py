"""Tests for defcards.application.utils.text and utils.common."""

import pytest
import yaml

from defcards.application.utils.common import format_day, parse_day, round_half_up, round_int
from defcards.application.utils.text import (
    load_frontmatter_yaml,
    parse_frontmatter,
    phrase_pattern,
    rebuild_markdown_with_frontmatter,
    scrub_internal_keys,
    split_frontmatter,
)

# ---------- Frontmatter ----------


def test_split_frontmatter_offset_points_at_body():
    text = "---\ndef-type: atomic\n---\nBody here\n"
    raw, offset = split_frontmatter(text)
    assert raw == "def-type: atomic"
    assert text[offset:] == "Body here\n"


def test_split_frontmatter_handles_bom_and_crlf():
    text = "\ufeff---\r\nkey: v\r\n---\r\nBody"
    raw, offset = split_frontmatter(text)
    assert raw == "key: v"
    assert text[offset:] == "Body"


def test_split_frontmatter_requires_closing_delimiter():
    assert split_frontmatter("---\nkey: v\nno closing") is None
    assert split_frontmatter("No frontmatter") is None
    assert split_frontmatter("") is None


def test_parse_frontmatter_valid():
    meta, body = parse_frontmatter("---\naliases: [a, b]\n---\nText")
    assert meta == {"aliases": ["a", "b"]}
    assert body == "Text"


def test_parse_frontmatter_without_block_returns_whole_text():
    meta, body = parse_frontmatter("# Title\nText")
    assert meta == {}
    assert body == "# Title\nText"


def test_parse_frontmatter_duplicate_keys_reports_error():
    text = "---\nkey: 1\nkey: 2\n---\nBody"
    meta, body = parse_frontmatter(text)
    assert "__yaml_error__" in meta
    assert "duplicate key" in meta["__yaml_error__"]
    assert body == text


def test_load_frontmatter_yaml_tabs_fixed():
    assert load_frontmatter_yaml("outer:\n\tinner: 1") == {"outer": {"inner": 1}}


def test_load_frontmatter_yaml_rejects_non_mapping():
    with pytest.raises(yaml.YAMLError):
        load_frontmatter_yaml("- just\n- a list")


def test_scrub_internal_keys():
    assert scrub_internal_keys({"a": 1, "__b": 2, "c": [{"__d": 1, "e": 2}]}) == {
        "a": 1,
        "c": [{"e": 2}],
    }


def test_rebuild_markdown_roundtrip_keeps_body():
    meta = {"def-type": "atomic", "flashcard": {"status": "review", "interval": 6}}
    text = rebuild_markdown_with_frontmatter(meta, "Body\n")
    assert text.startswith("---\ndef-type: atomic\n")
    parsed, body = parse_frontmatter(text)
    assert parsed == meta
    assert body == "Body\n"


def test_rebuild_markdown_multiline_uses_literal_block():
    text = rebuild_markdown_with_frontmatter({"note": "line one\nline two"}, "")
    assert "note: |" in text


# ---------- Phrase matching ----------


def test_phrase_pattern_whole_words_only():
    pat = phrase_pattern("tree")
    assert pat.search("A Tree grows")
    assert not pat.search("street")


def test_phrase_pattern_multiword_spans_whitespace():
    assert phrase_pattern("binary tree").search("a binary\n  tree here")


def test_phrase_pattern_symbols():
    assert phrase_pattern("C++").search("written in C++.")


# ---------- Rounding and days ----------


def test_round_half_up():
    assert round_int(2.5) == 3
    assert round_int(37.5) == 38
    assert round_int(14.64) == 15
    assert round_half_up(1.25, 1) == 1.3


def test_parse_day():
    d = parse_day("2024-02-29")
    assert format_day(d) == "2024-02-29"
    assert parse_day("2024-02-30") is None
    assert parse_day("yesterday") is None
