from __future__ import annotations

from pathlib import Path

import pytest

from wikisections.editor import SectionEditor
from wikisections.stores import PageStore


@pytest.fixture
def store(tmp_path: Path) -> PageStore:
    """Page store persisted under the pytest tmp_path."""
    return PageStore(tmp_path / "wiki.json")


@pytest.fixture
def editor(store: PageStore) -> SectionEditor:
    return SectionEditor(store)
