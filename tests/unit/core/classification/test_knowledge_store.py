from __future__ import annotations

"""
Unit tests for the persisted subject knowledge store.

Verifies best-effort loading, full-document rewrites on mutation and the
referential invariants between subjects, variations, exclusions and the
unclassified queue.
"""

import json
from pathlib import Path

import pytest

from pyqcrawler.core.classification.knowledge_store import (
    EXCLUSIONS_FILE,
    SUBJECTS_FILE,
    UNCLASSIFIED_FILE,
    VARIATIONS_FILE,
    KnowledgeStore,
    KnowledgeStoreError,
    normalize_store_path,
    subject_key_from_name,
)


def _read(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def test_subject_key_from_name() -> None:
    """TC-01: Keys are upper-case with single underscores."""
    assert subject_key_from_name("Engineering Physics (II)") == "ENGINEERING_PHYSICS_II"
    assert subject_key_from_name("  data -- structures ") == "DATA_STRUCTURES"


def test_normalize_store_path() -> None:
    assert normalize_store_path("2016\\FE%20PHY.pdf") == "2016/FE PHY.pdf"

# -----------------------------------------------------------------------------
# LOADING
# -----------------------------------------------------------------------------

def test_load_missing_directory_starts_empty(tmp_path: Path) -> None:
    """TC-02: A fresh data directory is created and every document is empty."""
    data_dir = tmp_path / "fresh"
    store = KnowledgeStore(str(data_dir)).load()

    assert data_dir.is_dir()
    assert store.subjects == {}
    assert store.variations == {}
    assert store.exclusions == []
    assert store.unclassified == []


def test_load_corrupt_document_uses_empty(tmp_path: Path) -> None:
    """TC-03: Unreadable or mistyped documents degrade to empty structures."""
    (tmp_path / SUBJECTS_FILE).write_text("{not json", encoding="utf-8")
    (tmp_path / EXCLUSIONS_FILE).write_text('{"a": 1}', encoding="utf-8")
    (tmp_path / VARIATIONS_FILE).write_text('{"DBMS": "DBMS"}', encoding="utf-8")

    store = KnowledgeStore(str(tmp_path)).load()

    assert store.subjects == {}
    assert store.exclusions == []
    assert store.variations == {"DBMS": "DBMS"}
    assert store.find_matches("DBMS") == []


def test_reload_round_trip(seeded_store: KnowledgeStore) -> None:
    """TC-04: Every mutation is visible to a fresh instance."""
    reloaded = KnowledgeStore(seeded_store.data_dir).load()

    assert reloaded.subjects == seeded_store.subjects
    assert reloaded.variations == seeded_store.variations
    assert reloaded.exclusions == ["2016/EXCLUDED.pdf"]

# -----------------------------------------------------------------------------
# MUTATIONS
# -----------------------------------------------------------------------------

def test_add_subject_keeps_existing_entry(seeded_store: KnowledgeStore) -> None:
    assert seeded_store.add_subject("PHY", "Applied Physics") is False
    assert seeded_store.get_standard("PHY") == "Engineering Physics"


def test_add_variation_requires_known_subject(seeded_store: KnowledgeStore) -> None:
    """TC-05: A variation may only point at an existing subject key."""
    with pytest.raises(KnowledgeStoreError):
        seeded_store.add_variation("CHEMISTRY", "CHEM")
    assert "CHEMISTRY" not in seeded_store.variations


def test_add_variation_upper_cases_and_persists(seeded_store: KnowledgeStore) -> None:
    seeded_store.add_variation("  engg physics ", "PHY")

    saved = _read(Path(seeded_store.data_dir) / VARIATIONS_FILE)
    assert saved["ENGG PHYSICS"] == "PHY"


def test_add_subject_rejects_empty_key(seeded_store: KnowledgeStore) -> None:
    with pytest.raises(KnowledgeStoreError):
        seeded_store.add_subject("  ", "Nothing")


def test_exclusion_removes_path_from_queue(seeded_store: KnowledgeStore) -> None:
    """TC-06: A path is never both excluded and unclassified."""
    assert seeded_store.add_unclassified("2017/NOTES.pdf") is True
    seeded_store.add_exclusion("2017/NOTES.pdf")

    data_dir = Path(seeded_store.data_dir)
    assert "2017/NOTES.pdf" not in seeded_store.unclassified
    assert "2017/NOTES.pdf" not in _read(data_dir / UNCLASSIFIED_FILE)
    assert "2017/NOTES.pdf" in _read(data_dir / EXCLUSIONS_FILE)


def test_exclusion_of_other_spelling_removes_queued_path(seeded_store: KnowledgeStore) -> None:
    """TC-06: An absolute exclusion clears the relative queue entry it covers."""
    seeded_store.add_unclassified("2016/X.pdf")
    seeded_store.add_unclassified("2016/Y.pdf")

    seeded_store.add_exclusion("/srv/lib/2016/X.pdf")

    assert seeded_store.is_excluded("2016/X.pdf") is True
    assert seeded_store.unclassified == ["2016/Y.pdf"]
    assert _read(Path(seeded_store.data_dir) / UNCLASSIFIED_FILE) == ["2016/Y.pdf"]


def test_existing_exclusion_still_clears_queue(seeded_store: KnowledgeStore) -> None:
    # Loaded state can already hold a path in both documents
    seeded_store.unclassified.append("2016/EXCLUDED.pdf")

    seeded_store.add_exclusion("2016/EXCLUDED.pdf")

    assert seeded_store.unclassified == []
    assert seeded_store.exclusions.count("2016/EXCLUDED.pdf") == 1


def test_excluded_path_is_not_queued(seeded_store: KnowledgeStore) -> None:
    assert seeded_store.add_unclassified("2016/EXCLUDED.pdf") is False
    assert seeded_store.unclassified == []


def test_queue_is_deduplicated(seeded_store: KnowledgeStore) -> None:
    assert seeded_store.add_unclassified("2017/A.pdf") is True
    assert seeded_store.add_unclassified("2017/A.pdf") is False
    assert seeded_store.unclassified == ["2017/A.pdf"]


def test_mapping_clears_queue_entry(seeded_store: KnowledgeStore) -> None:
    seeded_store.add_unclassified("2017/A.pdf")
    seeded_store.add_mapping("2017/A.pdf", "PHY")

    assert seeded_store.is_unclassified("2017/A.pdf") is False

# -----------------------------------------------------------------------------
# QUERIES
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "path",
    [
        "2016/EXCLUDED.pdf",
        "2016\\EXCLUDED.pdf",
        "http://server/lib/2016/EXCLUDED.pdf",
        "EXCLUDED.pdf",
    ],
)
def test_is_excluded_path_forms(seeded_store: KnowledgeStore, path: str) -> None:
    """TC-07: Absolute, relative and separator variants of one path agree."""
    assert seeded_store.is_excluded(path) is True


def test_is_excluded_negative(seeded_store: KnowledgeStore) -> None:
    assert seeded_store.is_excluded("2016/INCLUDED.pdf") is False
    assert seeded_store.is_excluded("") is False


def test_get_stats_progress(seeded_store: KnowledgeStore) -> None:
    """TC-08: Progress is the classified share of known entries."""
    seeded_store.add_unclassified("2017/A.pdf")
    seeded_store.add_unclassified("2017/B.pdf")

    stats = seeded_store.get_stats()

    assert stats == {
        "subjects": 2,
        "variations": 2,
        "exclusions": 1,
        "unclassified": 2,
        "progress": 40,
    }


def test_get_stats_empty_store(tmp_path: Path) -> None:
    assert KnowledgeStore(str(tmp_path)).load().get_stats()["progress"] == 0
