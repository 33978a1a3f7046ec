from __future__ import annotations

"""
Integration tests for the JSON document sink.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from pyqcrawler.core.services.persistence import (
    PAPERS_DOCUMENT,
    TREE_DOCUMENT,
    JsonDocumentSink,
    PersistenceError,
    build_tree_document,
)


def test_replace_all_semantics(tmp_path: Path) -> None:
    """TC-01: Each save replaces the previous document in full."""
    sink = JsonDocumentSink(str(tmp_path / "out"))

    sink.save_collection({"papers": [1, 2, 3]})
    path = sink.save_collection({"papers": []})

    assert Path(path).name == PAPERS_DOCUMENT
    assert json.loads(Path(path).read_text(encoding="utf-8")) == {"papers": []}
    assert [p.name for p in (tmp_path / "out").iterdir()] == [PAPERS_DOCUMENT]


def test_tree_document_envelope(tmp_path: Path) -> None:
    structure = {"stats": {"totalFiles": 1, "totalDirectories": 0}, "meta": {"papers": [], "years": ["2016"]}}

    doc = build_tree_document(structure)
    path = JsonDocumentSink(str(tmp_path)).save_tree(doc)

    saved = json.loads(Path(path).read_text(encoding="utf-8"))
    assert Path(path).name == TREE_DOCUMENT
    assert saved["meta"] == {"years": ["2016"]}
    assert saved["stats"]["totalFiles"] == 1
    assert saved["stats"]["lastUpdated"] == saved["lastUpdated"]
    assert "papers" in saved["structure"]["meta"]


def test_missing_output_dir_is_fatal() -> None:
    with pytest.raises(PersistenceError):
        JsonDocumentSink("").save_collection({})


def test_unserializable_document_is_fatal(tmp_path: Path) -> None:
    """TC-02: Write failures surface as PersistenceError and leave no temp files."""
    with pytest.raises(PersistenceError):
        JsonDocumentSink(str(tmp_path)).save_collection({"bad": object()})

    assert list(tmp_path.iterdir()) == []


def test_unwritable_output_dir_is_fatal(tmp_path: Path) -> None:
    with patch("pyqcrawler.core.services.persistence.safe_mkdir", return_value=(False, "denied")):
        with pytest.raises(PersistenceError, match="denied"):
            JsonDocumentSink(str(tmp_path / "x")).save_tree({})
