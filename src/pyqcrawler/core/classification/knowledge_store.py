from __future__ import annotations

"""
Subject Knowledge Store.

Persists the classifier's learned dictionaries as four JSON documents in a
data directory: the canonical subject catalog, the variation dictionary,
the permanent exclusions and the unclassified queue. Loading is best-effort
and every mutation rewrites the owning document in full. A single lock
serializes mutations so concurrent callers cannot interleave rewrites.
"""

import logging
import os
import re
import threading
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from pyqcrawler.core.classification.matcher import (
    SubjectMatch,
    get_matching_variations,
    get_partial_variations,
)
from pyqcrawler.infra.fs import read_json, safe_mkdir, write_json_atomic

logger = logging.getLogger(__name__)

SUBJECTS_FILE = "subjects.json"
VARIATIONS_FILE = "variations.json"
EXCLUSIONS_FILE = "exclusions.json"
UNCLASSIFIED_FILE = "unclassified.json"


class KnowledgeStoreError(ValueError):
    """Raised when a mutation would break the store's referential invariants."""


def normalize_store_path(path: str) -> str:
    """Normalize separators and percent-encoding for path comparisons."""
    return unquote((path or "").strip()).replace("\\", "/")


def paths_match(exclusion: str, path: str) -> bool:
    """
    Check whether a stored exclusion covers a normalized path.

    Matches exact paths, bare file names, and whole-segment suffixes in
    either direction so absolute and relative forms of one path agree.
    """
    if not exclusion or not path:
        return False
    if exclusion in (path, path.rsplit("/", 1)[-1]):
        return True
    return path.endswith("/" + exclusion) or exclusion.endswith("/" + path)


def subject_key_from_name(name: str) -> str:
    """
    Derive a catalog key from a subject name.

    Example: 'Engineering Physics (II)' -> 'ENGINEERING_PHYSICS_II'.
    """
    key = re.sub(r"[^A-Z0-9]", "_", name.upper())
    return re.sub(r"_+", "_", key).strip("_")


class KnowledgeStore:
    """
    Mutable, persisted classification dictionaries.

    Invariants maintained by the mutators:
    - a path is never in both the exclusions and the unclassified queue;
    - every new variation points at an existing subject key.
    """

    def __init__(self, data_dir: str) -> None:
        self.data_dir = data_dir
        self._lock = threading.RLock()

        self.subjects: Dict[str, Dict[str, str]] = {}
        self.variations: Dict[str, str] = {}
        self.exclusions: List[str] = []
        self.unclassified: List[str] = []

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> "KnowledgeStore":
        """
        Load every document, substituting empty structures for unreadable ones.

        Returns:
            KnowledgeStore: self, for chaining.
        """
        ok, err = safe_mkdir(self.data_dir)
        if not ok:
            logger.warning(f"KnowledgeStore: Cannot create data directory {self.data_dir}: {err}")

        with self._lock:
            self.subjects = self._load_document(SUBJECTS_FILE, dict)
            self.variations = self._load_document(VARIATIONS_FILE, dict)
            self.exclusions = [normalize_store_path(p) for p in self._load_document(EXCLUSIONS_FILE, list)]
            self.unclassified = [normalize_store_path(p) for p in self._load_document(UNCLASSIFIED_FILE, list)]

            dangling = [v for v, key in self.variations.items() if key not in self.subjects]
            if dangling:
                logger.warning(
                    f"KnowledgeStore: {len(dangling)} variation(s) reference unknown subjects "
                    f"and will be ignored: {dangling[:5]}"
                )

        logger.info(
            f"KnowledgeStore: Loaded {len(self.subjects)} subjects, {len(self.variations)} variations, "
            f"{len(self.exclusions)} exclusions, {len(self.unclassified)} unclassified."
        )
        return self

    def _load_document(self, file_name: str, expected: type) -> Any:
        path = os.path.join(self.data_dir, file_name)
        if not os.path.exists(path):
            logger.debug(f"KnowledgeStore: {file_name} not found, starting empty.")
            return expected()
        try:
            data = read_json(path)
        except (OSError, ValueError) as e:
            logger.warning(f"KnowledgeStore: Failed to load {file_name}, using empty data. {e}")
            return expected()
        if not isinstance(data, expected):
            logger.warning(
                f"KnowledgeStore: {file_name} holds {type(data).__name__}, "
                f"expected {expected.__name__}. Using empty data."
            )
            return expected()
        return data

    def _save(self, file_name: str, data: Any) -> None:
        path = os.path.join(self.data_dir, file_name)
        try:
            write_json_atomic(path, data, indent=2)
        except OSError as e:
            logger.error(f"KnowledgeStore: Failed to save {file_name}: {e}")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_excluded(self, path: str) -> bool:
        """Check a path against the exclusions (see paths_match)."""
        normalized = normalize_store_path(path)
        with self._lock:
            return any(paths_match(exclusion, normalized) for exclusion in self.exclusions)

    def is_unclassified(self, path: str) -> bool:
        with self._lock:
            return normalize_store_path(path) in self.unclassified

    def get_standard(self, subject_key: str) -> Optional[str]:
        with self._lock:
            entry = self.subjects.get(subject_key)
        return entry.get("standard") if entry else None

    def find_matches(self, fragment: str) -> List[SubjectMatch]:
        """Match a fragment against the current variation dictionary."""
        with self._lock:
            return get_matching_variations(fragment, self.variations, self.subjects)

    def find_partial_matches(self, fragment: str) -> List[SubjectMatch]:
        """Variations sharing a significant word with a fragment."""
        with self._lock:
            return get_partial_variations(fragment, self.variations, self.subjects)

    def get_stats(self) -> Dict[str, Any]:
        """Summarize catalog sizes and the classified share of known entries."""
        with self._lock:
            stats: Dict[str, Any] = {
                "subjects": len(self.subjects),
                "variations": len(self.variations),
                "exclusions": len(self.exclusions),
                "unclassified": len(self.unclassified),
            }
        total = stats["variations"] + stats["exclusions"] + stats["unclassified"]
        stats["progress"] = round(100.0 * stats["variations"] / total) if total else 0
        return stats

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_subject(self, subject_key: str, standard: str) -> bool:
        """
        Register a canonical subject.

        Returns:
            bool: False if the key already existed (the entry is left untouched).
        """
        key = subject_key.strip()
        if not key:
            raise KnowledgeStoreError("Subject key must not be empty.")
        with self._lock:
            if key in self.subjects:
                return False
            self.subjects[key] = {"standard": standard.strip()}
            self._save(SUBJECTS_FILE, self.subjects)
        logger.info(f"KnowledgeStore: Added subject {key} -> {standard}")
        return True

    def add_variation(self, variation: str, subject_key: str) -> None:
        """
        Map an upper-cased variation to an existing subject key.

        Raises:
            KnowledgeStoreError: If the subject key is unknown or the text empty.
        """
        text = variation.strip().upper()
        if not text:
            raise KnowledgeStoreError("Variation must not be empty.")
        with self._lock:
            if subject_key not in self.subjects:
                raise KnowledgeStoreError(f"Unknown subject key: {subject_key}")
            self.variations[text] = subject_key
            self._save(VARIATIONS_FILE, self.variations)
        logger.info(f"KnowledgeStore: Added variation '{text}' -> {subject_key}")

    def add_exclusion(self, path: str) -> None:
        """
        Exclude a path permanently and drop it from the unclassified queue.

        Every queued entry the exclusion covers is dropped, including other
        spellings of the same path, even when the exclusion already existed.
        """
        normalized = normalize_store_path(path)
        if not normalized:
            raise KnowledgeStoreError("Exclusion path must not be empty.")
        with self._lock:
            if normalized not in self.exclusions:
                self.exclusions.append(normalized)
                self._save(EXCLUSIONS_FILE, self.exclusions)
                logger.info(f"KnowledgeStore: Excluded {normalized}")

            remaining = [p for p in self.unclassified if not paths_match(normalized, p)]
            if len(remaining) != len(self.unclassified):
                self.unclassified[:] = remaining
                self._save(UNCLASSIFIED_FILE, self.unclassified)

    def add_unclassified(self, path: str) -> bool:
        """
        Queue a path for human resolution.

        Returns:
            bool: True if the path was queued, False if already queued or excluded.
        """
        normalized = normalize_store_path(path)
        with self._lock:
            if normalized in self.unclassified or self.is_excluded(normalized):
                return False
            self.unclassified.append(normalized)
            self._save(UNCLASSIFIED_FILE, self.unclassified)
        logger.debug(f"KnowledgeStore: Queued unclassified {normalized}")
        return True

    def add_mapping(self, path: str, subject_key: str) -> None:
        """Record that a path has been classified, removing it from the queue."""
        normalized = normalize_store_path(path)
        with self._lock:
            if normalized in self.unclassified:
                self.unclassified.remove(normalized)
                self._save(UNCLASSIFIED_FILE, self.unclassified)
        logger.info(f"KnowledgeStore: Mapped {normalized} -> {subject_key}")
