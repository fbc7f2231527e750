"""CLI behaviour tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from wikisections.cli import _build_parser, main
from wikisections.logging import configure_logging
from wikisections.sections import parse_sections
from wikisections.stores import PageStore

from tests._fixtures.pages import TWO_SECTIONS


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["sections", "home", "--verbose"])

    assert args.verbose is True
    assert args.command == "sections"
    assert args.key == "home"


def test_cli_parses_set_body_options() -> None:
    args = _build_parser().parse_args(
        ["set-body", "home", "s1", "--file", "body.md", "--author", "Admin"]
    )

    assert args.section_id == "s1"
    assert args.file == Path("body.md")
    assert args.author == "Admin"


@pytest.fixture
def wiki_dir(tmp_path: Path) -> Path:
    (tmp_path / ".wikisections.yml").write_text('store:\n  path: "wiki.json"\n', encoding="utf-8")
    PageStore(tmp_path / "wiki.json").create_page("home", TWO_SECTIONS, author="Admin")
    return tmp_path


def test_cli_lists_sections(wiki_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", str(wiki_dir), "sections", "home"])

    assert capsys.readouterr().out.splitlines() == ["s1\tIntro", "s2\tDetails"]


def test_cli_append_prints_new_id(wiki_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", str(wiki_dir), "append", "home", "Extra"])

    assert capsys.readouterr().out.strip() == "section-1"
    content = PageStore(wiki_dir / "wiki.json").get_page("home").content
    assert [section.id for section in parse_sections(content)] == ["s1", "s2", "section-1"]


def test_cli_set_body_reads_stdin(
    wiki_dir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("From stdin\n"))

    main(["--config", str(wiki_dir), "set-body", "home", "s2"])

    assert "Updated section s2 of home" in capsys.readouterr().out
    content = PageStore(wiki_dir / "wiki.json").get_page("home").content
    assert parse_sections(content)[1].body == "From stdin"


def test_cli_missing_page_exits_with_error(wiki_dir: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(wiki_dir), "show", "nowhere"])

    assert excinfo.value.code == 1


def test_cli_writes_edit_log(wiki_dir: Path) -> None:
    log_file = wiki_dir / "logs" / "edits.log"

    main(
        ["--config", str(wiki_dir), "--log-file", str(log_file)]
        + ["rename", "home", "s1", "Introduction"]
    )
    configure_logging()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert any(
        "wikisections.editor: Renamed section s1 on page home" in line for line in lines
    )
