from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries, a seeded knowledge store
   and an in-memory listing server used across unit and integration tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from pyqcrawler.core.classification.knowledge_store import KnowledgeStore  # noqa: E402
from pyqcrawler.domain.paper_models import DirectoryEntry  # noqa: E402

LIB_URL = "http://server/lib/"


# -----------------------------------------------------------------------------
# Fakes
# -----------------------------------------------------------------------------
class FakeListingClient:
    """Serves canned listings keyed by URL; unknown URLs list as empty."""

    def __init__(self, listings: Dict[str, List[DirectoryEntry]], failing: tuple = ()) -> None:
        self.listings = listings
        self.failing = set(failing)
        self.fetched: List[str] = []
        self.closed = False

    def fetch(self, url: str) -> List[DirectoryEntry]:
        self.fetched.append(url)
        if url in self.failing:
            raise RuntimeError(f"listing exploded at {url}")
        return list(self.listings.get(url, []))

    def close(self) -> None:
        self.closed = True


def _dir(name: str, url: str) -> DirectoryEntry:
    return DirectoryEntry(name=name, is_directory=True, path=url)


def _pdf(name: str, url: str) -> DirectoryEntry:
    return DirectoryEntry(name=name, is_directory=False, path=url)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'pyqcrawler.domain.config', with every
    local directory redirected into the test's temporary directory.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        # Remote Source
        "base_url": LIB_URL,
        "base_path": "/lib/",
        "test_dir": "/2016/",

        # Local Storage
        "data_dir": str(tmp_path / "data"),
        "output_dir": str(tmp_path / "output"),
        "log_dir": str(tmp_path / "logs"),

        # Extraction Policy
        "min_year": 2000,
        "max_year": 2025,

        # Network Policy
        "request_timeout": 5.0,
        "max_retries": 0,
        "backoff_factor": 0.0,
        "workers": 1,

        # Run Modes
        "test_mode": False,
        "debug": False,
        "verbose": False,
        "interactive": False,
        "list_only": False,

        # Read-time URL Rewriting
        "legacy_base_url": "",
        "public_base_url": "",
    }


@pytest.fixture
def seeded_store(tmp_path: Path) -> KnowledgeStore:
    """Knowledge store with physics and DBMS subjects and one exclusion."""
    store = KnowledgeStore(str(tmp_path / "data")).load()
    store.add_subject("PHY", "Engineering Physics")
    store.add_variation("PHYSICS", "PHY")
    store.add_subject("DBMS", "Database Management Systems")
    store.add_variation("DBMS", "DBMS")
    store.add_exclusion("2016/EXCLUDED.pdf")
    return store


@pytest.fixture
def listing_server() -> FakeListingClient:
    """
    A small remote tree below LIB_URL.

    lib/
        2016/
            COMP/
                COMP_DBMS_SEM_V_INSEM.pdf
            FE_CHEMISTRY.pdf
            EXCLUDED.pdf
        FE_PHYSICS_2016.pdf
    """
    year = LIB_URL + "2016/"
    comp = year + "COMP/"
    return FakeListingClient({
        LIB_URL: [
            _dir("2016", year),
            _pdf("FE_PHYSICS_2016.pdf", LIB_URL + "FE_PHYSICS_2016.pdf"),
        ],
        year: [
            _dir("COMP", comp),
            _pdf("FE_CHEMISTRY.pdf", year + "FE_CHEMISTRY.pdf"),
            _pdf("EXCLUDED.pdf", year + "EXCLUDED.pdf"),
        ],
        comp: [
            _pdf("COMP_DBMS_SEM_V_INSEM.pdf", comp + "COMP_DBMS_SEM_V_INSEM.pdf"),
        ],
    })


@pytest.fixture
def fake_client_cls():
    """The FakeListingClient class, for tests that build their own listings."""
    return FakeListingClient
