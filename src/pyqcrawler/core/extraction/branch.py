from __future__ import annotations

"""
Branch Extractor.

First-year papers are always 'COMMON'. Postgraduate markers force 'MTECH'.
Re-exam papers get a restricted abbreviation search that ignores the generic
degree keys, so the re-exam marker cannot short-circuit to a degree label.
Otherwise the full abbreviation table is searched over the filename and then
each path segment, with a final 'BTECH' catch-all mapping to 'COMMON'.
"""

from functools import partial
from typing import Iterable, List, Optional, Tuple

from pyqcrawler.core.extraction.common import (
    Rule,
    apply_rules,
    contains_any,
    contains_token,
    is_first_year_paper,
    split_path,
)
from pyqcrawler.domain.constants import (
    BRANCH_MAPPINGS,
    DEFAULT_BASE_PATH,
    GENERIC_BRANCH_KEYS,
    POSTGRADUATE_TOKENS,
    RE_EXAM_TOKENS,
    UNDERGRADUATE_TOKENS,
)


def _search_table(
        texts: Iterable[str],
        table: Iterable[Tuple[str, str]],
) -> Optional[str]:
    """Return the mapped value of the first table key found, text by text."""
    entries = list(table)
    for text in texts:
        for key, value in entries:
            if contains_token(text, key):
                return value
    return None


def _filename_then_path(path: str, file_name: str, base_path: str) -> List[str]:
    return [file_name, *split_path(path, base_path)]

# -----------------------------------------------------------------------------
# RULES
# -----------------------------------------------------------------------------

def branch_from_first_year(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    return "COMMON" if is_first_year_paper(path, file_name, base_path) else None


def branch_from_postgraduate(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    return "MTECH" if contains_any(_filename_then_path(path, file_name, base_path), POSTGRADUATE_TOKENS) else None


def branch_from_re_exam(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    texts = _filename_then_path(path, file_name, base_path)
    if not contains_any(texts, RE_EXAM_TOKENS):
        return None
    restricted = [(k, v) for k, v in BRANCH_MAPPINGS.items() if k not in GENERIC_BRANCH_KEYS]
    return _search_table(texts, restricted)


def branch_from_table(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    return _search_table(_filename_then_path(path, file_name, base_path), BRANCH_MAPPINGS.items())


def branch_from_degree(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> Optional[str]:
    return "COMMON" if contains_any(_filename_then_path(path, file_name, base_path), UNDERGRADUATE_TOKENS) else None

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def branch_rules(base_path: str = DEFAULT_BASE_PATH) -> List[Rule]:
    """Build the ordered branch rules bound to a listing root."""
    return [
        ("first year", partial(branch_from_first_year, base_path=base_path)),
        ("postgraduate", partial(branch_from_postgraduate, base_path=base_path)),
        ("re-exam restricted table", partial(branch_from_re_exam, base_path=base_path)),
        ("abbreviation table", partial(branch_from_table, base_path=base_path)),
        ("undergraduate fallback", partial(branch_from_degree, base_path=base_path)),
    ]


def extract_branch(path: str, file_name: str, base_path: str = DEFAULT_BASE_PATH) -> str:
    """
    Infer the engineering branch.

    Args:
        path: Resource URL or path.
        file_name: Listed file name.
        base_path: Decoded path prefix of the listing root.

    Returns:
        str: Standard branch code or 'Unknown'.
    """
    return apply_rules("branch", branch_rules(base_path), path, file_name)
