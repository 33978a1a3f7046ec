from __future__ import annotations

"""
Remote Inventory (list-only mode).

Enumerates the remote listing tree without extraction, classification or
persistence, and optionally dumps the result as a dated JSON file.
"""

import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional, Set

from pyqcrawler.infra.fs import write_json_atomic
from pyqcrawler.infra.network.listing_client import ListingClient

logger = logging.getLogger(__name__)


def get_nested_entries(
        client: ListingClient,
        url: str,
        _visited: Optional[Set[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Recursively list every entry below a URL.

    Each level contributes its own entries first, followed by the entries
    of each sub-directory in listing order.

    Args:
        client: Listing client used for every fetch.
        url: Listing URL to start from.

    Returns:
        List[Dict[str, Any]]: {path, isDirectory} items.
    """
    visited = _visited if _visited is not None else set()
    visited.add(url)

    entries = client.fetch(url)
    result = [entry.to_dict() for entry in entries]

    for entry in entries:
        if entry.is_directory and entry.path not in visited:
            result.extend(get_nested_entries(client, entry.path, visited))

    return result


def dump_inventory(items: List[Dict[str, Any]], log_dir: str, day: Optional[date] = None) -> str:
    """
    Write an inventory to '<log_dir>/file-list-YYYY-MM-DD.json'.

    Raises:
        OSError: If the file cannot be written.
    """
    stamp = (day or date.today()).isoformat()
    path = os.path.join(log_dir, f"file-list-{stamp}.json")
    write_json_atomic(path, items, indent=2)
    logger.info(f"Inventory: File list saved to {path}")
    return path


def summarize_inventory(items: List[Dict[str, Any]]) -> Dict[str, int]:
    directories = sum(1 for item in items if item.get("isDirectory"))
    return {
        "totalItems": len(items),
        "files": len(items) - directories,
        "directories": directories,
    }
