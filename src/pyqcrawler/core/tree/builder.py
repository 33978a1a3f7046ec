from __future__ import annotations

"""
Crawl Tree Builder.

Inserts papers and directory records into the parent-linked node hierarchy,
propagating counters and facet values from each insertion point up to the
root. Also provides the cycle-breaking clean pass used before persistence
and the inverse reload pass (rebuild nodes, then re-attach parents).
"""

import logging
import re
from typing import Any, Dict, List, Optional, Set
from urllib.parse import unquote, urlparse

from pyqcrawler.domain.constants import DEFAULT_BASE_PATH
from pyqcrawler.domain.paper_models import Paper, add_paper_facets
from pyqcrawler.domain.tree_models import (
    NODE_DIRECTORY,
    NODE_FILE,
    DirectoryNode,
    NodeMeta,
    NodeStats,
)

logger = logging.getLogger(__name__)

_UNSAFE_KEY_RX = re.compile(r"[.$]")
_WHITESPACE_RX = re.compile(r"\s+")

# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def sanitize_key(key: str) -> str:
    """Replace characters the document store rejects in field names."""
    return _UNSAFE_KEY_RX.sub("_", key)


def _split_url(url: str, base_path: str):
    """Return (url prefix up to the listing root, decoded segments below it)."""
    parsed = urlparse(url)
    path = unquote(parsed.path)
    root = "/"
    if base_path and base_path in path:
        cut = path.index(base_path) + len(base_path)
        root, path = path[:cut], path[cut:]
    segments = [_WHITESPACE_RX.sub(" ", s).strip() for s in path.split("/")]
    prefix = f"{parsed.scheme}://{parsed.netloc}{root}" if parsed.netloc else root
    return prefix, [s for s in segments if s]

# -----------------------------------------------------------------------------
# INSERTION
# -----------------------------------------------------------------------------

def propagate_stats(node: Optional[DirectoryNode], delta_files: int, delta_directories: int) -> None:
    """Add the deltas to a node and every ancestor."""
    current = node
    while current is not None:
        current.stats.total_files += delta_files
        current.stats.total_directories += delta_directories
        current = current.parent


def _new_node(name: str, path: str, node_type: str, parent: DirectoryNode) -> DirectoryNode:
    return DirectoryNode(name=name, path=path, type=node_type, parent=parent)


def insert(
        root: DirectoryNode,
        paper: Paper,
        is_directory: Optional[bool] = None,
        base_path: str = DEFAULT_BASE_PATH,
) -> Optional[DirectoryNode]:
    """
    Insert a paper or directory record into the tree.

    Intermediate segments become directory nodes, each creation counted as
    one directory on every ancestor. A file record ends in a file node that
    carries the paper as metadata and is counted once as a file. Facets are
    folded into the terminal node and all of its ancestors, so every node's
    facets are the union of its subtree.

    Args:
        root: Tree root.
        paper: Record to insert; its URL determines the position.
        is_directory: Overrides 'paper.is_directory' when given.
        base_path: Decoded path prefix of the listing root.

    Returns:
        Optional[DirectoryNode]: The terminal node, or None if the URL has
        no segments below the root.
    """
    directory = paper.is_directory if is_directory is None else is_directory
    prefix, segments = _split_url(paper.url, base_path)
    if not segments:
        logger.debug(f"Tree: Nothing to insert for {paper.url}")
        return None

    dir_segments = segments if directory else segments[:-1]
    current = root

    for i, part in enumerate(dir_segments):
        key = sanitize_key(part)
        child = current.children.get(key)
        if child is None:
            child = _new_node(part, prefix + "/".join(segments[:i + 1]), NODE_DIRECTORY, current)
            current.children[key] = child
            propagate_stats(current, 0, 1)
        current = child

    if directory:
        terminal = current
    else:
        name = segments[-1]
        key = sanitize_key(name)
        terminal = current.children.get(key)
        if terminal is None:
            terminal = _new_node(name, paper.url, NODE_FILE, current)
            terminal.metadata = paper
            current.children[key] = terminal
            propagate_stats(current, 1, 0)
            for ancestor in current.iter_ancestors():
                ancestor.meta.papers.append(paper)
        else:
            terminal.metadata = paper

    for node in terminal.iter_ancestors():
        add_paper_facets(node.meta.facets, paper)

    return terminal

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def clean_tree(node: DirectoryNode) -> Dict[str, Any]:
    """
    Produce a serializable copy of a subtree without parent links.

    Returns:
        Dict[str, Any]: Nested document with every field except 'parent'.
    """
    out: Dict[str, Any] = {
        "name": node.name,
        "path": node.path,
        "type": node.type,
        "children": {key: clean_tree(child) for key, child in node.children.items()},
        "stats": node.stats.to_dict(),
        "meta": node.meta.to_dict(),
    }
    if node.metadata is not None:
        out["metadata"] = node.metadata.to_dict()
    return out


def node_from_dict(data: Dict[str, Any]) -> DirectoryNode:
    """
    Rebuild a subtree from a cleaned document.

    Parent links are left unset; call attach_parents() afterwards.
    """
    stats = data.get("stats") or {}
    meta = data.get("meta") or {}
    node_meta = NodeMeta(papers=[Paper.from_dict(p) for p in meta.get("papers", [])])
    for key in node_meta.facets:
        node_meta.facets[key] = list(meta.get(key, []))

    metadata = data.get("metadata")
    return DirectoryNode(
        name=data.get("name", ""),
        path=data.get("path", ""),
        type=data.get("type", NODE_DIRECTORY),
        children={k: node_from_dict(v) for k, v in (data.get("children") or {}).items()},
        stats=NodeStats(
            total_files=int(stats.get("totalFiles", 0)),
            total_directories=int(stats.get("totalDirectories", 0)),
        ),
        meta=node_meta,
        metadata=Paper.from_dict(metadata) if metadata else None,
    )


def attach_parents(root: DirectoryNode) -> DirectoryNode:
    """Re-link every child to its parent in one top-down pass."""
    root.parent = None
    stack: List[DirectoryNode] = [root]
    while stack:
        node = stack.pop()
        for child in node.children.values():
            child.parent = node
            stack.append(child)
    return root


def has_cyclic_reference(obj: Any, _path: Optional[Set[int]] = None, _names: bool = False) -> bool:
    """
    Detect back-references in a document about to be persisted.

    A 'parent' field on a node, a live DirectoryNode, or a container
    reachable from itself counts as a cycle. Keys of a 'children' map are
    remote directory names, so a folder called 'parent' is not a field.
    """
    if isinstance(obj, DirectoryNode):
        return True
    if not isinstance(obj, (dict, list)):
        return False

    path = _path or set()
    if id(obj) in path:
        return True
    path = path | {id(obj)}

    if isinstance(obj, list):
        return any(has_cyclic_reference(v, path) for v in obj)

    if not _names and "parent" in obj:
        return True
    return any(
        has_cyclic_reference(v, path, _names=(key == "children" and not _names))
        for key, v in obj.items()
    )


def iter_file_nodes(root: DirectoryNode):
    """Yield every file node beneath a root, depth first."""
    stack: List[DirectoryNode] = [root]
    while stack:
        node = stack.pop()
        if node.is_file:
            yield node
        stack.extend(reversed(list(node.children.values())))
