"""Tests for the section heading outline."""

from __future__ import annotations

from wikisections.sections import build_outline, slugify


def test_outline_skips_fenced_code() -> None:
    body = "# Heroes\n\n```bash\n# not a heading\n```\n\n## Build & Test ##\ntext\n### Étape 2"

    outline = build_outline(body, "home")

    assert [(heading.id, heading.title, heading.level) for heading in outline] == [
        ("home-section-0", "Heroes", 1),
        ("home-section-1", "Build & Test", 2),
        ("home-section-2", "Étape 2", 3),
    ]
    assert outline[1].anchor == "build-test"


def test_slugify_collapses_separators() -> None:
    assert slugify("  Captain Nova -- Sterling!  ") == "captain-nova-sterling"
