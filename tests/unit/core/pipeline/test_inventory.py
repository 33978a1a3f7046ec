from __future__ import annotations

"""
Unit tests for the list-only inventory helpers.
"""

import json
from datetime import date
from pathlib import Path

from pyqcrawler.core.pipeline.inventory import dump_inventory, get_nested_entries, summarize_inventory
from pyqcrawler.domain.paper_models import DirectoryEntry

LIB = "http://server/lib/"


def test_nested_entries_parent_level_first(listing_server) -> None:
    """TC-01: Each level lists its own entries before descending."""
    items = get_nested_entries(listing_server, LIB)

    assert [i["path"] for i in items] == [
        LIB + "2016/",
        LIB + "FE_PHYSICS_2016.pdf",
        LIB + "2016/COMP/",
        LIB + "2016/FE_CHEMISTRY.pdf",
        LIB + "2016/EXCLUDED.pdf",
        LIB + "2016/COMP/COMP_DBMS_SEM_V_INSEM.pdf",
    ]
    assert items[0] == {"path": LIB + "2016/", "isDirectory": True}


def test_nested_entries_visit_each_listing_once(fake_client_cls) -> None:
    """TC-02: A listing linking back to itself is not refetched."""
    loop = DirectoryEntry("self", True, LIB)
    client = fake_client_cls({LIB: [loop]})

    items = get_nested_entries(client, LIB)

    assert items == [{"path": LIB, "isDirectory": True}]
    assert client.fetched == [LIB]


def test_summarize_inventory(listing_server) -> None:
    summary = summarize_inventory(get_nested_entries(listing_server, LIB))
    assert summary == {"totalItems": 6, "files": 4, "directories": 2}


def test_dump_inventory_dated_file(tmp_path: Path) -> None:
    path = dump_inventory([{"path": "x", "isDirectory": False}], str(tmp_path / "logs"), day=date(2024, 3, 1))

    assert path.endswith("file-list-2024-03-01.json")
    assert json.loads(Path(path).read_text(encoding="utf-8")) == [{"path": "x", "isDirectory": False}]
