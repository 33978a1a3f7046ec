from __future__ import annotations

"""
Paper Domain Data Models.

Defines the transient listing entries produced by the fetcher, the Paper record
built for every discovered PDF, and the flat searchable collection together with
its persisted document shape.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List

from pyqcrawler.domain.constants import FACET_FIELDS, UNKNOWN

# -----------------------------------------------------------------------------
# LISTING ENTRIES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectoryEntry:
    """
    A single anchor parsed from a remote directory listing.

    Attributes:
        name: Display name with trailing slash removed and whitespace collapsed.
        is_directory: True for sub-listings, False for PDF files.
        path: Absolute URL resolved against the listing URL.
    """
    name: str
    is_directory: bool
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "isDirectory": self.is_directory}

# -----------------------------------------------------------------------------
# PAPER
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Paper:
    """
    Metadata inferred for one discovered resource.

    Every classification field defaults to the 'Unknown' sentinel. Directory
    records reuse this shape with 'is_directory' set so that tree insertion
    and facet propagation can treat both uniformly.

    Attributes:
        file_name: Raw file (or directory) name as listed.
        url: Absolute URL of the resource.
        year: Four-digit year string.
        branch: Standard branch code.
        semester: Standard semester label.
        exam_type: Standard exam type code.
        subject: Matched variation text.
        standard_subject: Canonical subject label from the knowledge store.
        is_directory: Marks directory-flavored records.
    """
    file_name: str
    url: str
    year: str = UNKNOWN
    branch: str = UNKNOWN
    semester: str = UNKNOWN
    exam_type: str = UNKNOWN
    subject: str = UNKNOWN
    standard_subject: str = UNKNOWN
    is_directory: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Render the record with the persisted (camelCase) field names."""
        return {
            "fileName": self.file_name,
            "url": self.url,
            "year": self.year or UNKNOWN,
            "branch": self.branch or UNKNOWN,
            "semester": self.semester or UNKNOWN,
            "examType": self.exam_type or UNKNOWN,
            "subject": self.subject or UNKNOWN,
            "standardSubject": self.standard_subject or UNKNOWN,
            "isDirectory": self.is_directory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Paper":
        return cls(
            file_name=str(data.get("fileName", "")),
            url=str(data.get("url", "")),
            year=str(data.get("year") or UNKNOWN),
            branch=str(data.get("branch") or UNKNOWN),
            semester=str(data.get("semester") or UNKNOWN),
            exam_type=str(data.get("examType") or UNKNOWN),
            subject=str(data.get("subject") or UNKNOWN),
            standard_subject=str(data.get("standardSubject") or UNKNOWN),
            is_directory=bool(data.get("isDirectory", False)),
        )

    def with_url(self, url: str) -> "Paper":
        return replace(self, url=url)

# -----------------------------------------------------------------------------
# FACETS
# -----------------------------------------------------------------------------

def empty_facets() -> Dict[str, List[str]]:
    """Build a fresh facet map with one empty list per facet key."""
    return {key: [] for key, _ in FACET_FIELDS}


def add_unique_value(values: List[str], value: str) -> None:
    """Append a facet value unless it is empty, the sentinel, or already present."""
    if value and value != UNKNOWN and value not in values:
        values.append(value)


def add_paper_facets(facets: Dict[str, List[str]], paper: Paper) -> None:
    """Fold every facet of a paper into a facet map."""
    for key, attr in FACET_FIELDS:
        add_unique_value(facets[key], getattr(paper, attr))

# -----------------------------------------------------------------------------
# FLAT COLLECTION
# -----------------------------------------------------------------------------

@dataclass
class PaperCollection:
    """
    Flat, searchable view of every classified paper in a crawl.

    Attributes:
        papers: Papers in discovery order.
        meta: Deduplicated facet values across all papers.
        total_files: Number of papers appended.
        total_directories: Number of directories traversed.
        last_updated: Timestamp of collection creation.
    """
    papers: List[Paper] = field(default_factory=list)
    meta: Dict[str, List[str]] = field(default_factory=empty_facets)
    total_files: int = 0
    total_directories: int = 0
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def add_paper(self, paper: Paper) -> None:
        self.papers.append(paper)
        self.total_files += 1
        add_paper_facets(self.meta, paper)

    def to_document(self) -> Dict[str, Any]:
        """
        Build the persisted collection document.

        Empty facets are written as ["Unknown"] so consumers never receive an
        empty filter list.

        Returns:
            Dict[str, Any]: {papers, meta, stats} document.
        """
        meta = {key: list(values) if values else [UNKNOWN] for key, values in self.meta.items()}
        return {
            "papers": [p.to_dict() for p in self.papers],
            "meta": meta,
            "stats": {
                "totalFiles": self.total_files,
                "totalDirectories": self.total_directories,
                "lastUpdated": datetime.now(timezone.utc).isoformat(),
            },
        }
