from __future__ import annotations

"""
Crawl Result Persistence Service.

Hands the two crawl documents (flat paper collection and cleaned tree) to a
storage sink with replace-all semantics. The bundled sink writes JSON files
into an output directory; any object implementing the DocumentSink protocol
can stand in for a database-backed one.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from pyqcrawler.infra.fs import safe_mkdir, write_json_atomic

logger = logging.getLogger(__name__)

PAPERS_DOCUMENT = "papers.json"
TREE_DOCUMENT = "directory.json"


class PersistenceError(RuntimeError):
    """Raised when crawl results cannot be stored; fatal for the run."""


class DocumentSink(Protocol):
    def save_collection(self, document: Dict[str, Any]) -> str: ...

    def save_tree(self, document: Dict[str, Any]) -> str: ...


def build_tree_document(structure: Dict[str, Any]) -> Dict[str, Any]:
    """
    Wrap a cleaned tree into its persisted envelope.

    Args:
        structure: Root document produced by clean_tree().

    Returns:
        Dict[str, Any]: {structure, meta, stats, lastUpdated}.
    """
    now = datetime.now(timezone.utc).isoformat()
    meta = dict(structure.get("meta") or {})
    meta.pop("papers", None)
    stats = dict(structure.get("stats") or {})
    stats["lastUpdated"] = now
    return {"structure": structure, "meta": meta, "stats": stats, "lastUpdated": now}


class JsonDocumentSink:
    """
    Stores each document as a JSON file, replacing any previous version.

    Writes go through a temporary sibling file, so readers only ever see
    the old or the new document in full.
    """

    def __init__(self, output_dir: Optional[str]) -> None:
        self.output_dir = output_dir

    def save_collection(self, document: Dict[str, Any]) -> str:
        return self._replace(PAPERS_DOCUMENT, document)

    def save_tree(self, document: Dict[str, Any]) -> str:
        return self._replace(TREE_DOCUMENT, document)

    def _replace(self, file_name: str, document: Dict[str, Any]) -> str:
        if not self.output_dir:
            raise PersistenceError("Output directory is not configured.")

        ok, err = safe_mkdir(self.output_dir)
        if not ok:
            raise PersistenceError(f"Cannot create output directory {self.output_dir}: {err}")

        path = os.path.join(self.output_dir, file_name)
        try:
            write_json_atomic(path, document, indent=2)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

        logger.info(f"Persistence: Saved {file_name} to {self.output_dir}")
        return path
