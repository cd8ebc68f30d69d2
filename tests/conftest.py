import os
from pathlib import Path

import pytest

from defcards.application.definition_index import DefinitionIndex
from defcards.application.parsing import FileRecordParser
from defcards.infrastructure.vault_store import VaultFileStore

ATOMIC_TEMPLATE = """---
def-type: atomic
aliases: [{aliases}]
---
{body}
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config files and DEFCARDS_* env out of every test."""
    monkeypatch.setattr("defcards.application.config.CONFIG_FILES", [])
    for key in list(os.environ):
        if key.startswith("DEFCARDS_"):
            monkeypatch.delenv(key)


@pytest.fixture
def mock_vault(tmp_path):
    """Creates a temporary directory structure mimicking a vault."""
    d = tmp_path / "MyVault"
    (d / "definitions").mkdir(parents=True)
    return d


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def def_root(mock_vault) -> Path:
    return mock_vault / "definitions"


@pytest.fixture
def write_def(def_root):
    """Write a file below the definitions folder and return its ref."""

    def _write(ref: str, text: str) -> str:
        path = def_root / ref
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return ref

    return _write


@pytest.fixture
def write_atomic(write_def):
    def _write(ref: str, body: str = "A definition.", aliases: str = "") -> str:
        return write_def(ref, ATOMIC_TEMPLATE.format(aliases=aliases, body=body))

    return _write


@pytest.fixture
def store(def_root) -> VaultFileStore:
    return VaultFileStore(def_root)


@pytest.fixture
def index(store) -> DefinitionIndex:
    return DefinitionIndex(store, FileRecordParser())
