import pytest

from defcards.domain.errors import UnknownTermError
from defcards.domain.models import (
    CardStatus,
    DefinitionRecord,
    FileKind,
    Grade,
    ReviewState,
    SessionRecord,
)


def test_file_kind_parse():
    assert FileKind.parse("Atomic") is FileKind.ATOMIC
    assert FileKind.parse(" 'consolidated' ") is FileKind.CONSOLIDATED
    assert FileKind.parse("glossary") is None
    assert FileKind.parse(None) is None
    assert FileKind.parse(FileKind.ATOMIC) is FileKind.ATOMIC


def test_record_key_is_lowercased_word():
    r = DefinitionRecord.create("Binary Tree", "body", "a.md", FileKind.ATOMIC)
    assert r.key == "binary tree"
    assert r.word == "Binary Tree"
    assert r.link_target == "a.md"


def test_record_aliases_drop_blanks_and_duplicates():
    r = DefinitionRecord.create(
        "Queue", "body", "a.md", FileKind.ATOMIC, aliases=["FIFO", " ", "fifo", "queue", "Line"]
    )
    assert r.aliases == ("FIFO", "Line")
    assert r.lookup_keys == ["queue", "fifo", "line"]


def test_grade_parse():
    assert Grade.parse("easy") is Grade.EASY
    assert Grade.parse("AGAIN") is Grade.AGAIN
    assert Grade.parse("2") is Grade.GOOD
    assert Grade.parse(1) is Grade.HARD
    with pytest.raises(ValueError):
        Grade.parse("perfect")


def test_review_state_accuracy():
    s = ReviewState(term_key="t", file_ref="t.md")
    assert s.is_new
    assert s.accuracy is None

    s = ReviewState(
        term_key="t", file_ref="t.md", status=CardStatus.REVIEW, total_reviews=4, correct_reviews=3
    )
    assert not s.is_new
    assert s.accuracy == 0.75


def test_session_record_total():
    s = SessionRecord("2024-03-01", new_cards_studied=2, review_cards_studied=5)
    assert s.total_studied == 7
    assert s.to_dict()["date"] == "2024-03-01"


def test_unknown_term_error_is_lookup_error():
    err = UnknownTermError("widget")
    assert isinstance(err, LookupError)
    assert err.term == "widget"
    assert "widget" in str(err)
