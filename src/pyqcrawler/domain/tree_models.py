from __future__ import annotations

"""
Directory Tree Structure Data Models.

Provides the recursive node type used to mirror the remote listing as a
hierarchy with aggregated statistics and facet metadata at every level.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pyqcrawler.domain.constants import FACET_FIELDS
from pyqcrawler.domain.paper_models import Paper

NODE_DIRECTORY = "directory"
NODE_FILE = "file"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class NodeStats:
    """Running totals of file and directory descendants."""
    total_files: int = 0
    total_directories: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"totalFiles": self.total_files, "totalDirectories": self.total_directories}


@dataclass
class NodeMeta:
    """
    Aggregated metadata of a subtree.

    Attributes:
        papers: Papers whose file node lies beneath this node.
        facets: Deduplicated facet values keyed by persisted facet name.
    """
    papers: List[Paper] = field(default_factory=list)
    facets: Dict[str, List[str]] = field(
        default_factory=lambda: {key: [] for key, _ in FACET_FIELDS}
    )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"papers": [p.to_dict() for p in self.papers]}
        for key, _ in FACET_FIELDS:
            out[key] = list(self.facets.get(key, []))
        return out


@dataclass(eq=False)
class DirectoryNode:
    """
    A node of the crawl tree.

    The 'parent' link is a non-owning back-reference used only while the tree
    is being built; it is excluded from repr and from every serialized form.

    Attributes:
        name: Decoded path segment (unsanitized).
        path: URL of the node (the listing root prefix plus its segments).
        type: 'directory' or 'file'.
        children: Child nodes keyed by sanitized segment.
        stats: Descendant counters.
        meta: Aggregated subtree metadata.
        metadata: The Paper attached to a file node (or directory record).
        parent: Enclosing node, None for the root.
    """
    name: str
    path: str
    type: str = NODE_DIRECTORY
    children: Dict[str, "DirectoryNode"] = field(default_factory=dict)
    stats: NodeStats = field(default_factory=NodeStats)
    meta: NodeMeta = field(default_factory=NodeMeta)
    metadata: Optional[Paper] = None
    parent: Optional["DirectoryNode"] = field(default=None, repr=False)

    @property
    def is_file(self) -> bool:
        return self.type == NODE_FILE

    def iter_ancestors(self, include_self: bool = True):
        """Yield this node (optionally) and every ancestor up to the root."""
        node: Optional[DirectoryNode] = self if include_self else self.parent
        while node is not None:
            yield node
            node = node.parent


def create_root(url: str, name: str = "root") -> DirectoryNode:
    """Create an empty directory node acting as the tree root."""
    return DirectoryNode(name=name, path=url, type=NODE_DIRECTORY)
