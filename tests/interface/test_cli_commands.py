"""Tests for CLI commands: help, terms, lookup, mentions, queue, grade, stats, config."""

import json

import pytest
from typer.testing import CliRunner

from defcards.interface.cli import app

runner = CliRunner()

GLOSSARY = """---
def-type: consolidated
---
# Stack
*LIFO*
Last in, first out.
"""


@pytest.fixture
def vault(mock_vault, write_atomic, write_def, tmp_path, monkeypatch):
    write_atomic("Queue.md", body="First in, first out.", aliases="FIFO")
    write_atomic("cs/Heap.md", body="A tree-shaped priority structure.")
    write_def("glossary.md", GLOSSARY)
    monkeypatch.setenv("DEFCARDS_VAULT_ROOT", str(mock_vault))
    monkeypatch.setenv("DEFCARDS_DATA_DIR", str(tmp_path / "data"))
    return mock_vault


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "defcards" in result.stdout
    for command in ("terms", "lookup", "queue", "grade", "stats", "config"):
        assert command in result.stdout


# --- Definitions ---


def test_terms_lists_every_word(vault):
    result = runner.invoke(app, ["terms"])
    assert result.exit_code == 0
    assert "Queue  (FIFO)  [definitions/Queue.md]" in result.stdout
    assert "Stack" in result.stdout
    assert "Heap" in result.stdout


def test_terms_json(vault):
    result = runner.invoke(app, ["terms", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [d["key"] for d in data] == ["heap", "queue", "stack"]
    assert data[2]["kind"] == "consolidated"


def test_lookup_by_alias(vault):
    result = runner.invoke(app, ["lookup", "fifo"])
    assert result.exit_code == 0
    assert "Queue" in result.stdout
    assert "First in, first out." in result.stdout


def test_lookup_unknown(vault):
    result = runner.invoke(app, ["lookup", "trie"])
    assert result.exit_code == 1
    assert "No definition for 'trie'" in result.stdout


def test_mentions(vault, tmp_path):
    note = tmp_path / "note.md"
    note.write_text("Push it on the stack, then pop the heap.")
    result = runner.invoke(app, ["mentions", str(note)])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == [
        "Stack  [definitions/glossary.md#Stack]",
        "Heap  [definitions/cs/Heap.md]",
    ]


def test_vault_option_overrides_config(vault, tmp_path):
    other = tmp_path / "other"
    (other / "defs").mkdir(parents=True)
    (other / "defs" / "Trie.md").write_text("---\ndef-type: atomic\n---\nPrefix tree.")

    result = runner.invoke(app, ["--vault", str(other), "--def-folder", "defs", "terms"])
    assert result.exit_code == 0
    assert "Trie" in result.stdout
    assert "Queue" not in result.stdout


def test_missing_definitions_folder(tmp_path, monkeypatch):
    monkeypatch.setenv("DEFCARDS_VAULT_ROOT", str(tmp_path))
    result = runner.invoke(app, ["terms"])
    assert result.exit_code == 1
    assert "Definitions folder not found" in result.output


# --- Flashcards ---


def test_queue_lists_new_atomic_cards(vault):
    result = runner.invoke(app, ["queue"])
    assert result.exit_code == 0
    assert "Today: 0 review + 2 new" in result.stdout
    assert "queue" in result.stdout
    assert "glossary.md" not in result.stdout


def test_queue_caps_exhausted_hint(vault, monkeypatch):
    monkeypatch.setenv("DEFCARDS_FLASHCARDS__DAILY_NEW_CARDS", "0")
    monkeypatch.setenv("DEFCARDS_FLASHCARDS__DAILY_REVIEW_LIMIT", "0")
    result = runner.invoke(app, ["queue"])
    assert result.exit_code == 0
    assert "defcards queue --extra" in result.stdout


def test_queue_extra_seeded(vault):
    first = runner.invoke(app, ["queue", "--extra", "--seed", "4"])
    second = runner.invoke(app, ["queue", "--extra", "--seed", "4"])
    assert first.exit_code == 0
    assert "Extra session: 2 card(s)" in first.stdout
    assert first.stdout == second.stdout


def test_grade_updates_file_and_sessions(vault, tmp_path):
    result = runner.invoke(app, ["grade", "FIFO", "good", "--seconds", "20"])
    assert result.exit_code == 0, result.output
    assert "queue: review, next review in 1 day(s)" in result.stdout

    text = (vault / "definitions" / "Queue.md").read_text()
    assert "flashcard:" in text
    sessions = json.loads((tmp_path / "data" / "sessions.json").read_text())
    assert sessions[0]["new_cards_studied"] == 1
    assert sessions[0]["total_time_seconds"] == 20

    queue = runner.invoke(app, ["queue"])
    assert "Today: 0 review + 1 new" in queue.stdout


def test_grade_unknown_term(vault):
    result = runner.invoke(app, ["grade", "trie", "good"])
    assert result.exit_code == 1
    assert "Unknown term 'trie'" in result.output


def test_grade_consolidated_term_is_rejected(vault):
    result = runner.invoke(app, ["grade", "stack", "easy"])
    assert result.exit_code == 1
    assert "only atomic definitions" in result.output


def test_grade_bad_answer(vault):
    result = runner.invoke(app, ["grade", "queue", "perfect"])
    assert result.exit_code == 2
    assert "Unknown grade" in result.output


def test_stats_json(vault):
    runner.invoke(app, ["grade", "queue", "good"])
    result = runner.invoke(app, ["stats", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["total_cards"] == 2
    assert data["review_cards"] == 1
    assert data["today_new_cards"] == 1
    assert data["current_streak"] == 1
    assert data["average_accuracy"] == 1.0


def test_stats_text(vault):
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "total 2: 2 new" in result.stdout


# --- Config ---


def test_config_show(vault):
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["vault_root"] == str(vault.resolve())
    assert data["parse"]["default_file_kind"] == "consolidated"
    assert data["flashcards"]["daily_new_cards"] == 20


def test_config_show_invalid(monkeypatch):
    monkeypatch.setenv("DEFCARDS_FLASHCARDS__DAILY_NEW_CARDS", "-4")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_study_scope_takes_vault_paths(vault, monkeypatch):
    monkeypatch.setenv("DEFCARDS_FLASHCARDS__STUDY_SCOPE", '["definitions/cs/"]')
    result = runner.invoke(app, ["queue"])
    assert result.exit_code == 0, result.output
    assert "Today: 0 review + 1 new" in result.stdout
    assert "heap  [definitions/cs/Heap.md]" in result.stdout
