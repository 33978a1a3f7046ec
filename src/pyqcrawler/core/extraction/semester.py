from __future__ import annotations

"""
Semester Extractor.

Reads a 'SEM <numeral>' / 'SEMESTER <numeral>' marker, then scans for
ordinal labels ('THIRD SEM', '5TH SEMESTER'), then looks for a semester
marker in a directory segment. First-year papers default to semester 1.
"""

import re
from functools import partial
from typing import List, Optional

from pyqcrawler.core.extraction.common import (
    Rule,
    apply_rules,
    contains_token,
    is_first_year_paper,
    split_path,
)
from pyqcrawler.domain.constants import (
    DEFAULT_BASE_PATH,
    SEMESTER_LABELS,
    SEMESTER_MAPPINGS,
    STANDARD_SEMESTERS,
)

# Longest numerals first so 'VIII' is not read as 'V'
_SEM_RX = re.compile(
    r"(?<![A-Z0-9])SEM(?:ESTER)?[\s_-]*(VIII|VII|VI|IV|V|III|II|I|\d)(?![A-Z0-9])"
)


def _semester_marker(text: str) -> Optional[str]:
    match = _SEM_RX.search(text.upper())
    if match:
        return SEMESTER_MAPPINGS.get(match.group(1))
    return None

# -----------------------------------------------------------------------------
# RULES
# -----------------------------------------------------------------------------

def semester_from_marker(path: str, file_name: str) -> Optional[str]:
    return _semester_marker(file_name)


def semester_from_label(path: str, file_name: str) -> Optional[str]:
    for label, value in SEMESTER_LABELS.items():
        if contains_token(file_name, label):
            return value
    return None


def semester_from_directory(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    for part in split_path(path, base_path)[:-1]:
        value = _semester_marker(part)
        if value:
            return value
    return None


def semester_from_first_year(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    return STANDARD_SEMESTERS["SEM1"] if is_first_year_paper(path, file_name, base_path) else None

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def semester_rules(base_path: str = DEFAULT_BASE_PATH) -> List[Rule]:
    """Build the ordered semester rules bound to a listing root."""
    return [
        ("filename marker", semester_from_marker),
        ("ordinal label", semester_from_label),
        ("directory marker", partial(semester_from_directory, base_path=base_path)),
        ("first year default", partial(semester_from_first_year, base_path=base_path)),
    ]


def extract_semester(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> str:
    """
    Infer the semester label.

    Args:
        path: Resource URL or path.
        file_name: Listed file name.
        base_path: Decoded path prefix of the listing root.

    Returns:
        str: Standard semester label or 'Unknown'.
    """
    return apply_rules("semester", semester_rules(base_path), path, file_name)
