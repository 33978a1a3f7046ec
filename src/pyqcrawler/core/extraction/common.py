from __future__ import annotations

"""
Extraction Rule Primitives.

Shared helpers for the table-driven metadata extractors: path segmentation,
token matching with filename-aware word boundaries, the first-year predicate,
and the ordered rule runner every extractor is expressed with.
"""

import logging
import re
from functools import lru_cache
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlparse

from pyqcrawler.domain.constants import DEFAULT_BASE_PATH, FIRST_YEAR_PATTERNS, UNKNOWN

logger = logging.getLogger(__name__)

# A rule inspects (path, file_name) and returns a value or None to fall through
Rule = Tuple[str, Callable[[str, str], Optional[str]]]

_WHITESPACE_RX = re.compile(r"\s+")
_FIRST_YEAR_RX = [re.compile(p) for p in FIRST_YEAR_PATTERNS]

# -----------------------------------------------------------------------------
# TEXT & PATH HELPERS
# -----------------------------------------------------------------------------

def clean_string(text: str) -> str:
    """Collapse whitespace, trim and upper-case."""
    return _WHITESPACE_RX.sub(" ", text or "").strip().upper()


def split_path(path: str, base_path: str = DEFAULT_BASE_PATH) -> List[str]:
    """
    Split a URL or path into cleaned, decoded segments below the listing root.

    Segments above the base path are dropped when the base path is present;
    otherwise every segment is kept so relative paths work unchanged.

    Args:
        path: Absolute URL, absolute path or path relative to the root.
        base_path: Decoded path prefix of the listing root.

    Returns:
        List[str]: Upper-cased non-empty segments.
    """
    raw = urlparse(path).path if "://" in path else path
    decoded = unquote(raw or "")
    if base_path and base_path in decoded:
        decoded = decoded[decoded.index(base_path) + len(base_path):]
    return [clean_string(part) for part in decoded.split("/") if part.strip()]


@lru_cache(maxsize=512)
def _token_rx(token: str) -> re.Pattern:
    # Underscores and punctuation count as boundaries in filenames
    return re.compile(rf"(?<![A-Z0-9]){re.escape(token)}(?![A-Z0-9])", re.IGNORECASE)


def contains_token(text: str, token: str) -> bool:
    """Check whether 'token' occurs in 'text' delimited by non-alphanumerics."""
    return bool(_token_rx(token.upper()).search(text.upper()))


def contains_any(texts: Iterable[str], needles: Sequence[str]) -> bool:
    """Plain substring test of any needle in any upper-cased text."""
    return any(n in t.upper() for t in texts for n in needles)


def is_first_year_paper(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> bool:
    """
    Decide whether a paper belongs to the shared first-year curriculum.

    Args:
        path: Resource URL or path.
        file_name: Listed file name.
        base_path: Decoded path prefix of the listing root.

    Returns:
        bool: True if the filename or any path segment matches a first-year pattern.
    """
    candidates = [file_name.upper(), *split_path(path, base_path)]
    return any(rx.search(text) for rx in _FIRST_YEAR_RX for text in candidates)

# -----------------------------------------------------------------------------
# RULE RUNNER
# -----------------------------------------------------------------------------

def apply_rules(field: str, rules: Sequence[Rule], path: str, file_name: str) -> str:
    """
    Evaluate rules in priority order and return the first produced value.

    Args:
        field: Field name used in trace logs.
        rules: Ordered (name, rule) pairs.
        path: Resource URL or path.
        file_name: Listed file name.

    Returns:
        str: The first non-empty rule result, or the 'Unknown' sentinel.
    """
    for name, rule in rules:
        value = rule(path, file_name)
        if value:
            logger.debug(f"Extraction: {field}={value!r} via '{name}' for {file_name}")
            return value
    return UNKNOWN
