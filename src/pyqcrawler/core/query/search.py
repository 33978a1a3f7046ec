from __future__ import annotations

"""
Paper Search Service.

Read-side helpers over a built (or reloaded) crawl tree: full-text and facet
filtering of file nodes with pagination, and the standard filter options.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from pyqcrawler.core.tree.builder import iter_file_nodes
from pyqcrawler.domain.constants import (
    BRANCH_MAPPINGS,
    DEFAULT_MAX_YEAR,
    DEFAULT_MIN_YEAR,
    EXAM_MAPPINGS,
    SEMESTER_MAPPINGS,
    STANDARD_BRANCHES,
    STANDARD_EXAM_TYPES,
    STANDARD_SEMESTERS,
)
from pyqcrawler.domain.paper_models import Paper
from pyqcrawler.domain.tree_models import DirectoryNode

DEFAULT_PER_PAGE = 12


@dataclass(frozen=True)
class SearchFilters:
    """Optional criteria; empty values match everything."""
    query: str = ""
    year: str = ""
    branch: str = ""
    semester: str = ""
    exam_type: str = ""
    subject: str = ""
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE


@dataclass(frozen=True)
class SearchResults:
    papers: List[Paper] = field(default_factory=list)
    total_pages: int = 0
    current_page: int = 1
    total_items: int = 0


def _standardize(paper: Paper) -> Paper:
    return replace(
        paper,
        branch=BRANCH_MAPPINGS.get(paper.branch.upper(), paper.branch),
        exam_type=EXAM_MAPPINGS.get(paper.exam_type.upper(), paper.exam_type),
        semester=SEMESTER_MAPPINGS.get(paper.semester.upper(), paper.semester),
    )


def _matches(paper: Paper, filters: SearchFilters) -> bool:
    if filters.year and paper.year != filters.year:
        return False
    if filters.branch and paper.branch != filters.branch:
        return False
    if filters.semester and paper.semester != filters.semester:
        return False
    if filters.exam_type and paper.exam_type != filters.exam_type:
        return False
    if filters.subject and filters.subject not in (paper.subject, paper.standard_subject):
        return False
    if filters.query:
        needle = filters.query.lower()
        fields = (paper.file_name, paper.branch, paper.year, paper.semester, paper.exam_type)
        if not any(needle in f.lower() for f in fields):
            return False
    return True


def search_papers(root: DirectoryNode, filters: Optional[SearchFilters] = None) -> SearchResults:
    """
    Search the file nodes of a tree.

    Results are standardized, sorted by year (newest first) then file name,
    and sliced to the requested page.

    Args:
        root: Tree root (parent links are not required).
        filters: Search criteria and pagination.

    Returns:
        SearchResults: The requested page plus totals.
    """
    filters = filters or SearchFilters()
    results: List[Paper] = []
    for node in iter_file_nodes(root):
        if node.metadata is None:
            continue
        paper = _standardize(node.metadata)
        if _matches(paper, filters):
            results.append(paper)

    results.sort(key=lambda p: p.file_name)
    results.sort(key=lambda p: p.year, reverse=True)

    page = max(1, filters.page)
    per_page = max(1, filters.per_page)
    start = (page - 1) * per_page
    return SearchResults(
        papers=results[start:start + per_page],
        total_pages=math.ceil(len(results) / per_page),
        current_page=page,
        total_items=len(results),
    )


def get_filter_options(
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
) -> Dict[str, List[Dict[str, str]]]:
    """List the standard values of every filterable facet as label/value pairs."""
    def _options(values) -> List[Dict[str, str]]:
        return [{"label": v, "value": v} for v in values]

    return {
        "years": _options(str(y) for y in range(max_year, min_year - 1, -1)),
        "branches": _options(STANDARD_BRANCHES.values()),
        "semesters": _options(STANDARD_SEMESTERS.values()),
        "examTypes": _options(STANDARD_EXAM_TYPES.values()),
    }
