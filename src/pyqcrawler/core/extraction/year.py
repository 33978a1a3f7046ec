from __future__ import annotations

"""
Year Extractor.

Infers the examination year from, in order: a slash-bounded '20NN' path
segment (digits may be space-separated, e.g. '/2 0 1 6/'), a raw '20NN' in
the filename, an academic-year label in the filename, and a month-named path
segment carrying a year. Years outside the accepted range fall through.
"""

import re
from functools import partial
from typing import List, Optional

from pyqcrawler.core.extraction.common import Rule, apply_rules, contains_token, split_path
from pyqcrawler.domain.constants import (
    ACADEMIC_YEAR_MAPPINGS,
    DEFAULT_BASE_PATH,
    DEFAULT_MAX_YEAR,
    DEFAULT_MIN_YEAR,
    MONTH_TOKENS,
)

_PATH_YEAR_RX = re.compile(r"(?:^|/)\s*(2\s*0\s*\d\s*\d)\s*(?=/|$)")
_FILENAME_YEAR_RX = re.compile(r"(?<!\d)(20\d{2})(?!\d)")
_EMBEDDED_YEAR_RX = re.compile(r"\b(20\d{2})\b")


def _in_range(year: str, min_year: int, max_year: int) -> Optional[str]:
    if year.isdigit() and min_year <= int(year) <= max_year:
        return year
    return None

# -----------------------------------------------------------------------------
# RULES
# -----------------------------------------------------------------------------

def year_from_path_segment(
        path: str,
        file_name: str,
        *,
        min_year: int,
        max_year: int,
        base_path: str = DEFAULT_BASE_PATH,
) -> Optional[str]:
    joined = "/" + "/".join(split_path(path, base_path))
    for match in _PATH_YEAR_RX.finditer(joined):
        year = _in_range(re.sub(r"\s+", "", match.group(1)), min_year, max_year)
        if year:
            return year
    return None


def year_from_filename(path: str, file_name: str, *, min_year: int, max_year: int) -> Optional[str]:
    for match in _FILENAME_YEAR_RX.finditer(file_name):
        year = _in_range(match.group(1), min_year, max_year)
        if year:
            return year
    return None


def year_from_academic_label(path: str, file_name: str, *, min_year: int, max_year: int) -> Optional[str]:
    upper = file_name.upper()
    for label, year in ACADEMIC_YEAR_MAPPINGS.items():
        if label in upper and _in_range(year, min_year, max_year):
            return year
    return None


def year_from_month_segment(
        path: str,
        file_name: str,
        *,
        min_year: int,
        max_year: int,
        base_path: str = DEFAULT_BASE_PATH,
) -> Optional[str]:
    for part in split_path(path, base_path):
        if not any(contains_token(part, month) for month in MONTH_TOKENS):
            continue
        match = _EMBEDDED_YEAR_RX.search(part)
        if match and _in_range(match.group(1), min_year, max_year):
            return match.group(1)
    return None

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def year_rules(
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
        base_path: str = DEFAULT_BASE_PATH,
) -> List[Rule]:
    """Build the ordered year rules bound to an accepted range and listing root."""
    bounds = {"min_year": min_year, "max_year": max_year}
    return [
        ("path segment", partial(year_from_path_segment, base_path=base_path, **bounds)),
        ("filename digits", partial(year_from_filename, **bounds)),
        ("academic label", partial(year_from_academic_label, **bounds)),
        ("month segment", partial(year_from_month_segment, base_path=base_path, **bounds)),
    ]


def extract_year(
        path: str,
        file_name: str,
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
        base_path: str = DEFAULT_BASE_PATH,
) -> str:
    """
    Infer the paper year.

    Args:
        path: Resource URL or path.
        file_name: Listed file name.
        min_year: Lowest accepted year (inclusive).
        max_year: Highest accepted year (inclusive).
        base_path: Decoded path prefix of the listing root.

    Returns:
        str: Four-digit year or 'Unknown'.
    """
    return apply_rules("year", year_rules(min_year, max_year, base_path), path, file_name)
