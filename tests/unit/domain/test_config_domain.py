from __future__ import annotations

"""
Unit tests for persistent configuration loading and saving.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from pyqcrawler.domain import config as config_module
from pyqcrawler.domain.config import get_default_config, load_config, save_config
from pyqcrawler.domain.constants import CURRENT_CONFIG_VERSION, DEFAULT_BASE_URL


@pytest.fixture
def config_file(tmp_path: Path):
    path = tmp_path / "config.json"
    with patch.object(config_module, "CONFIG_FILE", str(path)):
        yield path


def test_defaults_shape() -> None:
    cfg = get_default_config()

    assert cfg["base_url"] == DEFAULT_BASE_URL
    assert cfg["workers"] == 1
    assert cfg["interactive"] is False
    assert cfg["legacy_base_url"] == ""


def test_load_without_file_returns_defaults(config_file: Path) -> None:
    assert load_config() == get_default_config()


def test_save_then_load(config_file: Path) -> None:
    """TC-01: Saved settings come back merged over the defaults."""
    cfg = get_default_config()
    cfg["workers"] = 6
    save_config(cfg)

    state = json.loads(config_file.read_text(encoding="utf-8"))
    assert state["version"] == CURRENT_CONFIG_VERSION
    assert load_config()["workers"] == 6


def test_unknown_keys_are_ignored(config_file: Path) -> None:
    config_file.write_text(json.dumps({"settings": {"workers": 3, "bogus": 1}}), encoding="utf-8")

    cfg = load_config()

    assert cfg["workers"] == 3
    assert "bogus" not in cfg


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_corrupt_file_returns_defaults(config_file: Path, content: str) -> None:
    """TC-02: A broken settings file never blocks a run."""
    config_file.write_text(content, encoding="utf-8")
    assert load_config() == get_default_config()
