"""Tests for the section editing pipeline."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from wikisections.config import SectionsConfig
from wikisections.editor import SectionEditor, SectionNotFoundError
from wikisections.models import MAIN_CONTENT_ID
from wikisections.sections import parse_sections
from wikisections.stores import PageNotFoundError, PageStore

from tests._fixtures.pages import THREE_SECTIONS, TWO_SECTIONS


def test_view_enriches_with_page_metadata(editor: SectionEditor, store: PageStore) -> None:
    page = store.create_page("home", TWO_SECTIONS, author="Admin")

    viewed = editor.view("home")

    assert [section.id for section in viewed.sections or []] == ["s1", "s2"]
    assert all(section.author == "Admin" for section in viewed.sections or [])
    assert all(section.last_modified == page.updated_at for section in viewed.sections or [])


def test_update_body_persists_patch(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", TWO_SECTIONS)

    outcome = editor.update_body("home", "s2", "Updated", author="Editor")

    assert outcome.changed is True
    assert outcome.section_id == "s2"
    assert editor.get_section("home", "s2").body == "Updated"
    assert editor.get_section("home", "s1").body == "Hello"
    assert store.get_page("home").author == "Editor"


def test_update_body_promotes_legacy_page(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", "<!-- SECTION:main-content:Accueil -->\n# Bienvenue")

    editor.update_body("home", MAIN_CONTENT_ID, "# Nouveau contenu")

    sections = editor.view("home").sections or []
    assert len(sections) == 1
    assert sections[0].id == MAIN_CONTENT_ID
    assert sections[0].title == "Accueil"
    assert sections[0].body == "# Nouveau contenu"


def test_unchanged_edit_skips_write(editor: SectionEditor, store: PageStore) -> None:
    before = store.create_page("home", TWO_SECTIONS)

    outcome = editor.update_body("home", "s1", "Hello")

    assert outcome.changed is False
    assert store.get_page("home").updated_at == before.updated_at


def test_append_returns_new_section_id(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", TWO_SECTIONS)

    outcome = editor.append("home", "Extra")

    assert outcome.section_id == "section-1"
    assert [section.id for section in outcome.page.sections or []] == ["s1", "s2", "section-1"]


def test_random_ids_from_settings(store: PageStore) -> None:
    editor = SectionEditor(store, SectionsConfig(id_strategy="random"))
    store.create_page("home", "")

    outcome = editor.append("home", "First")

    assert outcome.section_id.startswith("section-")
    assert outcome.section_id != "section-1"


def test_rename_and_remove(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", THREE_SECTIONS)
    store.set_section_order("home", ["s3", "s2", "s1"])

    editor.rename("home", "s1", "Introduction")
    editor.remove("home", "s2")

    assert [(section.id, section.title) for section in editor.view("home").sections or []] == [
        ("s3", "Appendix"),
        ("s1", "Introduction"),
    ]
    assert store.get_section_order("home") == ["s3", "s1"]


def test_reorder_leaves_content_untouched(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", THREE_SECTIONS)

    page = editor.reorder("home", ["s2"])

    assert [section.id for section in page.sections or []] == ["s2", "s1", "s3"]
    assert store.get_page("home").content == THREE_SECTIONS


def test_get_unknown_section_raises(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", TWO_SECTIONS)

    with pytest.raises(SectionNotFoundError):
        editor.get_section("home", "missing")


def test_edit_missing_page_raises(editor: SectionEditor) -> None:
    with pytest.raises(PageNotFoundError):
        editor.update_body("nowhere", "s1", "x")


def test_invalid_section_id_rejected(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", TWO_SECTIONS)

    with pytest.raises(ValueError):
        editor.update_body("home", "bad id", "x")


def test_concurrent_edits_to_different_sections_are_kept(
    editor: SectionEditor, store: PageStore
) -> None:
    store.create_page("home", THREE_SECTIONS)
    edits = [("s1", f"one {index}") for index in range(20)] + [
        ("s3", f"three {index}") for index in range(20)
    ]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda edit: editor.update_body("home", *edit), edits))

    sections = parse_sections(store.get_page("home").content)
    assert sections[0].body.startswith("one ")
    assert sections[1].body == "World"
    assert sections[2].body.startswith("three ")


def test_remove_prunes_order_while_page_is_locked(
    editor: SectionEditor, store: PageStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    store.create_page("home", THREE_SECTIONS)
    store.set_section_order("home", ["s3", "s2", "s1"])
    held: list[bool] = []
    original = store.set_section_order

    def _recording(key: str, section_ids: list[str]) -> None:
        held.append(store.lock(key).locked())
        original(key, section_ids)

    monkeypatch.setattr(store, "set_section_order", _recording)

    editor.remove("home", "s2")
    editor.reorder("home", ["s1"])

    assert held == [True, True]
    assert store.get_section_order("home") == ["s1"]


def test_rename_replaces_orphan_title(editor: SectionEditor, store: PageStore) -> None:
    store.create_page("home", "<!-- SECTION:main-content:Old title -->\nBody text\n")

    outcome = editor.rename("home", MAIN_CONTENT_ID, "New title")

    assert outcome.changed is True
    assert [(section.id, section.title, section.body) for section in outcome.page.sections or []] == [
        (MAIN_CONTENT_ID, "New title", "Body text")
    ]


def test_quoted_markers_in_body_keep_section_title(
    editor: SectionEditor, store: PageStore
) -> None:
    store.create_page("home", TWO_SECTIONS)

    editor.update_body("home", "s1", "Use <!-- SECTION:s1:Other --> syntax")

    sections = editor.view("home").sections or []
    assert [(section.id, section.title) for section in sections] == [("s1", "Intro"), ("s2", "Details")]
    assert "SECTION:s1:Other" in sections[0].body


@pytest.mark.parametrize("section_id", ["a-->", "a>"])
def test_ids_that_could_close_other_sections_are_rejected(
    editor: SectionEditor, store: PageStore, section_id: str
) -> None:
    store.create_page("home", TWO_SECTIONS)

    with pytest.raises(ValueError):
        editor.rename("home", section_id, "Title")

    assert store.get_page("home").content == TWO_SECTIONS
