from __future__ import annotations

"""
Unit tests for the domain data models and result factories.
"""

from pyqcrawler.domain.crawl_models import create_error_result, create_success_result
from pyqcrawler.domain.paper_models import (
    DirectoryEntry,
    Paper,
    PaperCollection,
    add_unique_value,
    empty_facets,
)
from pyqcrawler.domain.tree_models import NODE_DIRECTORY, create_root


def test_paper_defaults_to_unknown() -> None:
    paper = Paper("a.pdf", "http://s/a.pdf")
    assert paper.year == paper.branch == paper.subject == "Unknown"
    assert paper.is_directory is False


def test_paper_document_round_trip() -> None:
    """TC-01: The camelCase document restores an equal record."""
    paper = Paper("a.pdf", "http://s/a.pdf", year="2016", exam_type="ESE", standard_subject="Physics")
    doc = paper.to_dict()

    assert doc["examType"] == "ESE"
    assert doc["standardSubject"] == "Physics"
    assert Paper.from_dict(doc) == paper


def test_paper_from_sparse_document() -> None:
    paper = Paper.from_dict({"fileName": "a.pdf", "url": "u", "year": ""})
    assert paper.year == "Unknown"


def test_with_url_returns_copy() -> None:
    paper = Paper("a.pdf", "old")
    assert paper.with_url("new").url == "new"
    assert paper.url == "old"


def test_directory_entry_document() -> None:
    entry = DirectoryEntry("2016", True, "http://s/2016/")
    assert entry.to_dict() == {"path": "http://s/2016/", "isDirectory": True}


def test_add_unique_value_skips_sentinel() -> None:
    values = []
    for v in ["2016", "Unknown", "", "2016", "2017"]:
        add_unique_value(values, v)
    assert values == ["2016", "2017"]


def test_collection_aggregates_facets() -> None:
    collection = PaperCollection()
    collection.add_paper(Paper("a.pdf", "u1", year="2016", branch="COMP"))
    collection.add_paper(Paper("b.pdf", "u2", year="2016", branch="IT"))

    assert collection.total_files == 2
    assert collection.meta["years"] == ["2016"]
    assert collection.meta["branches"] == ["COMP", "IT"]


def test_collection_document_fills_empty_facets() -> None:
    """TC-02: Empty facet lists are persisted as ['Unknown']."""
    collection = PaperCollection()
    collection.add_paper(Paper("a.pdf", "u1", year="2016"))
    collection.total_directories = 4

    doc = collection.to_document()

    assert doc["meta"]["years"] == ["2016"]
    assert doc["meta"]["branches"] == ["Unknown"]
    assert doc["stats"]["totalFiles"] == 1
    assert doc["stats"]["totalDirectories"] == 4
    assert "lastUpdated" in doc["stats"]
    assert collection.meta["branches"] == []


def test_empty_facets_keys() -> None:
    assert list(empty_facets()) == [
        "years", "branches", "examTypes", "semesters", "subjects", "standardSubjects",
    ]


def test_root_node() -> None:
    root = create_root("http://s/")
    assert root.type == NODE_DIRECTORY
    assert root.parent is None
    assert list(root.iter_ancestors()) == [root]
    assert "parent" not in repr(root)


def test_result_factories() -> None:
    cfg = {"test_mode": True, "interactive": False, "list_only": False}

    ok = create_success_result(cfg, "http://s/", persisted=True, output_paths={"papers": "p"})
    failed = create_error_result("quit", cfg, "http://s/", aborted=True)

    assert ok.ok and ok.test_mode and ok.persisted
    assert ok.output_paths == {"papers": "p"}
    assert not failed.ok and failed.aborted
    assert failed.error == "quit"
    assert failed.summary == {}
