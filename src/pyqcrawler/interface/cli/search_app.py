from __future__ import annotations

"""
Search Tool Controller.

Reloads the tree document written by the last persisted crawl, rebuilds the
node graph and answers filtered, paginated queries over its papers. Paper
URLs are served under the public base URL when one is configured; the stored
documents themselves are never modified.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from pyqcrawler.core.pipeline.validator import validate_config
from pyqcrawler.core.query.search import (
    DEFAULT_PER_PAGE,
    SearchFilters,
    SearchResults,
    get_filter_options,
    search_papers,
)
from pyqcrawler.core.services.persistence import TREE_DOCUMENT
from pyqcrawler.core.tree.builder import attach_parents, node_from_dict
from pyqcrawler.core.tree.url_rewriter import rewrite_paper_urls, rewrite_tree_urls
from pyqcrawler.domain.config import get_default_config, load_config
from pyqcrawler.domain.paper_models import Paper
from pyqcrawler.infra.fs import read_json
from pyqcrawler.infra.logging import LoggingConfig, configure_logging, get_logger
from pyqcrawler.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_CONFIG = 2

OVERRIDE_KEYS = ("output_dir", "legacy_base_url", "public_base_url")

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the search tool.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 unreadable tree, 2 bad config).
    """
    args = cli_args.build_search_parser().parse_args(argv)
    configure_logging(LoggingConfig.for_run(verbose=args.verbose))

    base_conf = get_default_config() if args.use_defaults else load_config()
    for key in OVERRIDE_KEYS:
        value = getattr(args, key, None)
        if value is not None:
            base_conf[key] = value

    try:
        cfg, warnings = validate_config(base_conf, strict=False)
    except (TypeError, ValueError) as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.options:
        _print_json(get_filter_options(cfg["min_year"], cfg["max_year"]))
        return EXIT_OK

    try:
        structure = load_tree_structure(cfg["output_dir"])
    except (OSError, ValueError) as e:
        logger.error(f"Search: Cannot load crawl tree: {e}")
        print(f"ERROR: Cannot load crawl tree: {e}", file=sys.stderr)
        return EXIT_FAILURE

    legacy, public = rewrite_prefixes(cfg)

    if args.dump_tree:
        _print_json(rewrite_tree_urls(structure, legacy, public))
        return EXIT_OK

    root = attach_parents(node_from_dict(structure))
    results = search_papers(root, filters_from_args(args))
    logger.debug(f"Search: {results.total_items} matches, page {results.current_page}/{results.total_pages}")

    _print_json(render_results(results, rewrite_paper_urls(results.papers, legacy, public)))
    return EXIT_OK

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def load_tree_structure(output_dir: str) -> Dict[str, Any]:
    """
    Read the persisted tree document and return its root structure.

    Raises:
        OSError: If the document cannot be read.
        ValueError: If it is not valid JSON or has no structure object.
    """
    document = read_json(os.path.join(output_dir, TREE_DOCUMENT))
    structure = document.get("structure") if isinstance(document, dict) else None
    if not isinstance(structure, dict):
        raise ValueError(f"{TREE_DOCUMENT} has no 'structure' object")
    return structure


def rewrite_prefixes(cfg: Dict[str, Any]) -> Tuple[str, str]:
    """Return (legacy, public) URL prefixes; the legacy one defaults to the crawl base URL."""
    public = cfg.get("public_base_url") or ""
    if not public:
        return "", ""
    legacy = cfg.get("legacy_base_url") or cfg["base_url"]
    # Keep the separator when only one side was written with a trailing slash
    if legacy.endswith("/") and not public.endswith("/"):
        public += "/"
    return legacy, public


def filters_from_args(args) -> SearchFilters:
    return SearchFilters(
        query=args.query,
        year=args.year,
        branch=args.branch,
        semester=args.semester,
        exam_type=args.exam_type,
        subject=args.subject,
        page=args.page,
        per_page=args.per_page or DEFAULT_PER_PAGE,
    )


def render_results(results: SearchResults, papers: List[Paper]) -> Dict[str, Any]:
    return {
        "papers": [p.to_dict() for p in papers],
        "totalPages": results.total_pages,
        "currentPage": results.current_page,
        "totalItems": results.total_items,
    }


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    sys.exit(main())
