"""Tests for section id generation."""

from __future__ import annotations

import pytest

import wikisections.sections.ids as ids_module
from wikisections.sections import SectionIdGenerator


def test_counter_starts_at_one() -> None:
    assert SectionIdGenerator().generate("") == "section-1"


def test_counter_continues_above_existing_ids() -> None:
    content = (
        "<!-- SECTION:section-2:Two -->\nx\n<!-- END_SECTION:section-2 -->\n"
        "<!-- END_SECTION:section-7 -->\n"
        "<!-- SECTION:intro:Intro -->\ny\n<!-- END_SECTION:intro -->"
    )

    assert SectionIdGenerator("counter").generate(content) == "section-8"


def test_random_ids_avoid_existing(monkeypatch: pytest.MonkeyPatch) -> None:
    tokens = iter(["aaaaaaaaaaaa", "bbbbbbbbbbbb"])
    monkeypatch.setattr(ids_module.secrets, "token_hex", lambda _: next(tokens))
    content = "<!-- SECTION:section-aaaaaaaaaaaa:A -->\nx\n<!-- END_SECTION:section-aaaaaaaaaaaa -->"

    assert SectionIdGenerator("random").generate(content) == "section-bbbbbbbbbbbb"


def test_random_ids_have_expected_shape() -> None:
    section_id = SectionIdGenerator("random").generate("")

    assert section_id.startswith("section-")
    assert len(section_id) == len("section-") + 12


def test_unknown_strategy_is_rejected() -> None:
    with pytest.raises(ValueError):
        SectionIdGenerator("timestamp")
