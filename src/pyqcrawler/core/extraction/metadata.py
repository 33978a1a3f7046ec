from __future__ import annotations

"""
Metadata Extraction Facade.

Runs the four independent field extractors over a (path, file name) pair and
assembles directory records for tree insertion.
"""

from dataclasses import dataclass
from typing import Dict

from pyqcrawler.core.extraction.branch import extract_branch
from pyqcrawler.core.extraction.exam_type import extract_exam_type
from pyqcrawler.core.extraction.semester import extract_semester
from pyqcrawler.core.extraction.year import extract_year
from pyqcrawler.domain.constants import DEFAULT_BASE_PATH, DEFAULT_MAX_YEAR, DEFAULT_MIN_YEAR, UNKNOWN
from pyqcrawler.domain.paper_models import Paper


@dataclass(frozen=True)
class MetadataExtractor:
    """Field extraction bound to an accepted year range and a listing root."""
    min_year: int = DEFAULT_MIN_YEAR
    max_year: int = DEFAULT_MAX_YEAR
    base_path: str = DEFAULT_BASE_PATH

    def extract(self, path: str, file_name: str) -> Dict[str, str]:
        """
        Infer year, branch, semester and exam type.

        Args:
            path: Resource URL or path.
            file_name: Listed file name.

        Returns:
            Dict[str, str]: Field values keyed by Paper attribute name.
        """
        return {
            "year": extract_year(path, file_name, self.min_year, self.max_year, self.base_path),
            "branch": extract_branch(path, file_name, self.base_path),
            "semester": extract_semester(path, file_name, self.base_path),
            "exam_type": extract_exam_type(path, file_name, self.base_path),
        }

    def directory_record(self, url: str, name: str) -> Paper:
        """
        Build the Paper-shaped record of a directory.

        Subjects are never inferred for directories.
        """
        clean_name = name.strip()
        return Paper(
            file_name=clean_name,
            url=url,
            subject=UNKNOWN,
            standard_subject=UNKNOWN,
            is_directory=True,
            **self.extract(url, clean_name),
        )
