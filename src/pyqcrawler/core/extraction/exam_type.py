from __future__ import annotations

"""
Exam Type Extractor.

Re-exam directories force the end-semester label. Otherwise the exam table
is scanned over the filename and then each path segment, and a few filename
phrases act as last-resort signals.
"""

from functools import partial
from typing import List, Optional

from pyqcrawler.core.extraction.common import Rule, apply_rules, contains_token, split_path
from pyqcrawler.domain.constants import (
    DEFAULT_BASE_PATH,
    EXAM_FALLBACK_SIGNALS,
    EXAM_MAPPINGS,
    RE_EXAM_TOKENS,
)

# -----------------------------------------------------------------------------
# RULES
# -----------------------------------------------------------------------------

def exam_from_re_exam_directory(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    for part in split_path(path, base_path):
        if any(token in part for token in RE_EXAM_TOKENS):
            return "ESE"
    return None


def exam_from_table(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    for text in (file_name, *split_path(path, base_path)):
        for key, value in EXAM_MAPPINGS.items():
            if contains_token(text, key):
                return value
    return None


def exam_from_signal(path: str, file_name: str) -> Optional[str]:
    upper = file_name.upper()
    for phrase, value in EXAM_FALLBACK_SIGNALS:
        if phrase in upper:
            return value
    return None

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def exam_rules(base_path: str = DEFAULT_BASE_PATH) -> List[Rule]:
    """Build the ordered exam type rules bound to a listing root."""
    return [
        ("re-exam directory", partial(exam_from_re_exam_directory, base_path=base_path)),
        ("exam table", partial(exam_from_table, base_path=base_path)),
        ("filename signal", exam_from_signal),
    ]


def extract_exam_type(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> str:
    """
    Infer the exam type.

    Args:
        path: Resource URL or path.
        file_name: Listed file name.
        base_path: Decoded path prefix of the listing root.

    Returns:
        str: Standard exam type code or 'Unknown'.
    """
    return apply_rules("exam type", exam_rules(base_path), path, file_name)
