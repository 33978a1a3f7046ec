from __future__ import annotations

"""
Crawl Domain Data Models.

Defines the result object and factory functions used to communicate crawl
outcomes between the crawl engine and the interface layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CrawlResult:
    """
    Unified result object of a crawl (or list-only) execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        start_url: Listing URL the traversal started from.
        test_mode: Whether the crawl was restricted to the test subtree.
        interactive: Whether the resolution workflow was enabled.
        list_only: Whether the run only enumerated the remote tree.
        aborted: True when the user quit the run from the resolver.
        persisted: True when both documents were handed to the sink.
        output_paths: Locations written by the sink or inventory dump.
        inventory: List-only items as {path, isDirectory} dicts.
        summary: Counts and unique facet values of the crawl.
    """
    ok: bool
    error: str

    start_url: str
    test_mode: bool
    interactive: bool
    list_only: bool

    aborted: bool = False
    persisted: bool = False
    output_paths: Dict[str, str] = field(default_factory=dict)
    inventory: List[Dict[str, Any]] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        start_url: str,
        aborted: bool = False,
        persisted: bool = False,
        output_paths: Optional[Dict[str, str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> CrawlResult:
    """
    Create a failed crawl result instance.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        start_url: The listing URL that was targeted.
        aborted: Whether the failure is a user quit.
        persisted: Whether partial results were flushed before exiting.
        output_paths: Artifacts written before the failure.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        CrawlResult: An immutable error result object.
    """
    return CrawlResult(
        ok=False,
        error=error,
        start_url=start_url,
        test_mode=cfg.get("test_mode", False),
        interactive=cfg.get("interactive", False),
        list_only=cfg.get("list_only", False),
        aborted=aborted,
        persisted=persisted,
        output_paths=output_paths or {},
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        start_url: str,
        persisted: bool = False,
        output_paths: Optional[Dict[str, str]] = None,
        inventory: Optional[List[Dict[str, Any]]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> CrawlResult:
    """
    Create a successful crawl result instance.

    Args:
        cfg: Final configuration used during execution.
        start_url: The listing URL that was crawled.
        persisted: Whether the documents were handed to the sink.
        output_paths: Artifacts written by the sink or the inventory dump.
        inventory: List-only enumeration.
        summary_extra: Final execution metrics.

    Returns:
        CrawlResult: An immutable success result object.
    """
    return CrawlResult(
        ok=True,
        error="",
        start_url=start_url,
        test_mode=cfg.get("test_mode", False),
        interactive=cfg.get("interactive", False),
        list_only=cfg.get("list_only", False),
        persisted=persisted,
        output_paths=output_paths or {},
        inventory=inventory or [],
        summary=summary_extra or {},
    )
