from __future__ import annotations

"""
Read-time URL Rewriting.

Swaps the legacy listing host in stored URLs for the public one. Inputs are
never mutated; every function returns fresh objects.
"""

from typing import Any, Dict, List

from pyqcrawler.domain.paper_models import Paper


def rewrite_url(url: str, legacy_base_url: str, public_base_url: str) -> str:
    if not legacy_base_url or not public_base_url:
        return url
    return url.replace(legacy_base_url, public_base_url, 1)


def rewrite_paper_url(paper: Paper, legacy_base_url: str, public_base_url: str) -> Paper:
    return paper.with_url(rewrite_url(paper.url, legacy_base_url, public_base_url))


def rewrite_paper_urls(papers: List[Paper], legacy_base_url: str, public_base_url: str) -> List[Paper]:
    return [rewrite_paper_url(p, legacy_base_url, public_base_url) for p in papers]


def rewrite_tree_urls(node: Dict[str, Any], legacy_base_url: str, public_base_url: str) -> Dict[str, Any]:
    """
    Rewrite every URL of a cleaned tree document.

    Covers the node path, the attached metadata and the papers listed in
    'meta', recursively through all children.

    Args:
        node: Document produced by clean_tree().
        legacy_base_url: Prefix to replace.
        public_base_url: Replacement prefix.

    Returns:
        Dict[str, Any]: A rewritten deep copy of the affected fields.
    """
    def _rewrite(url: str) -> str:
        return rewrite_url(url, legacy_base_url, public_base_url)

    out = dict(node)
    out["path"] = _rewrite(node.get("path", ""))

    meta = node.get("meta")
    if isinstance(meta, dict):
        out["meta"] = dict(meta)
        out["meta"]["papers"] = [
            {**p, "url": _rewrite(p.get("url", ""))} for p in meta.get("papers", [])
        ]

    metadata = node.get("metadata")
    if isinstance(metadata, dict):
        out["metadata"] = {**metadata, "url": _rewrite(metadata.get("url", ""))}

    out["children"] = {
        key: rewrite_tree_urls(child, legacy_base_url, public_base_url)
        for key, child in (node.get("children") or {}).items()
    }
    return out
