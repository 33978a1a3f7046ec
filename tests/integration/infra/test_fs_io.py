from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Validates path normalization, data directory resolution and the atomic
JSON persistence helpers shared by the stores and sinks.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from pyqcrawler.infra.fs import (
    get_user_data_dir,
    normalize_path,
    read_json,
    safe_mkdir,
    write_json_atomic,
)

# -----------------------------------------------------------------------------
# PATH RESOLUTION TESTS
# -----------------------------------------------------------------------------

def test_get_user_data_dir_windows() -> None:
    """TC-01: Verify resolution of %LOCALAPPDATA% on Windows systems."""
    mock_appdata = "C:/Users/Test/AppData/Local"
    with patch("os.name", "nt"):
        with patch.dict(os.environ, {"LOCALAPPDATA": mock_appdata}):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                assert "PyqCrawler" in path


def test_get_user_data_dir_unix() -> None:
    mock_home = "/home/testuser"
    with patch("os.name", "posix"):
        with patch("os.path.expanduser", return_value=mock_home):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                assert path.replace("\\", "/").endswith("/home/testuser/.pyqcrawler")


def test_normalize_path_expansion() -> None:
    """TC-02: Verify expansion of environment variables and the fallback."""
    with patch.dict(os.environ, {"PYQ_TEST_VAR": "papers"}):
        path = normalize_path("$PYQ_TEST_VAR/sub", fallback=".")
        assert path.endswith(os.path.join("papers", "sub"))

    assert normalize_path("   ", fallback="out") == os.path.abspath("out")

# -----------------------------------------------------------------------------
# FILESYSTEM OPERATIONS TESTS
# -----------------------------------------------------------------------------

def test_safe_mkdir_success(tmp_path: Path) -> None:
    target = tmp_path / "deep" / "nested" / "dir"
    success, err = safe_mkdir(str(target))

    assert success is True
    assert err is None
    assert target.exists()


def test_safe_mkdir_permission_error() -> None:
    with patch("os.makedirs", side_effect=OSError("Permission Denied")):
        success, err = safe_mkdir("/root/forbidden")
        assert success is False
        assert "Permission Denied" in err

# -----------------------------------------------------------------------------
# JSON PERSISTENCE TESTS
# -----------------------------------------------------------------------------

def test_write_json_atomic_creates_and_replaces(tmp_path: Path) -> None:
    """TC-03: Documents are rewritten in full and no temp files linger."""
    target = tmp_path / "nested" / "subjects.json"

    write_json_atomic(str(target), {"PHY": "Physics"})
    write_json_atomic(str(target), {"DBMS": "Databases", "name": "Ωmega"})

    assert read_json(str(target)) == {"DBMS": "Databases", "name": "Ωmega"}
    assert "Ωmega" in target.read_text(encoding="utf-8")
    assert [p.name for p in target.parent.iterdir()] == ["subjects.json"]


def test_write_json_atomic_failure_keeps_previous(tmp_path: Path) -> None:
    target = tmp_path / "tree.json"
    write_json_atomic(str(target), {"ok": True})

    with pytest.raises(TypeError):
        write_json_atomic(str(target), {"bad": object()})

    assert json.loads(target.read_text(encoding="utf-8")) == {"ok": True}
    assert [p.name for p in tmp_path.iterdir()] == ["tree.json"]


def test_read_json_errors(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        read_json(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{nope", encoding="utf-8")
    with pytest.raises(ValueError):
        read_json(str(broken))
