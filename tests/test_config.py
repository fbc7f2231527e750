"""Tests for wikisections.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from wikisections.config import ConfigError, WikiConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, WikiConfig)
    assert config.root == tmp_path.resolve()
    assert config.store.path == tmp_path.resolve() / "wiki.json"
    assert config.sections.title_grammar == "extended"
    assert config.sections.id_strategy == "counter"
    assert config.sections.default_title == "Main content"
    assert config.service.host == "127.0.0.1"
    assert config.service.port == 8000


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".wikisections.yml"
    config_file.write_text(
        """
store:
  path: "data/pages.json"
sections:
  title_grammar: legacy
  id_strategy: random
  default_title: "Contenu principal"
service:
  host: "0.0.0.0"
  port: 3001
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.store.path == (tmp_path / "data" / "pages.json").resolve()
    assert config.sections.title_grammar == "legacy"
    assert config.sections.id_strategy == "random"
    assert config.sections.default_title == "Contenu principal"
    assert config.service.host == "0.0.0.0"
    assert config.service.port == 3001


def test_load_config_rejects_unknown_grammar(tmp_path: Path) -> None:
    (tmp_path / ".wikisections.yml").write_text(
        "sections:\n  title_grammar: greedy\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".wikisections.yml").write_text("store: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    (tmp_path / ".wikisections.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
