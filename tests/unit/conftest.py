"""Shared test fixtures."""

from pathlib import Path

import pytest

from mdshelf.store import EntityStore
from tests.unit.fakes import FakeStore

WORKSPACE_FILES = {
    "README.md": "# Readme\n\nTop level.\n",
    "notes.txt": "plain notes\n",
    "image.png": "not a document",
    "guide/intro.md": "# Intro\n## Setup\n## Usage\n",
    "guide/advanced/deep.md": "# Deep\n",
    "guide/advanced/deeper/hidden-by-depth.md": "# Too deep\n",
    ".git/config.md": "# should never be indexed\n",
}


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Return a small docs tree with nested folders, a non-document, and a .git folder."""
    root = tmp_path / "docs"
    for rel, contents in WORKSPACE_FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    return root


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> EntityStore:
    return EntityStore(data_dir)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
