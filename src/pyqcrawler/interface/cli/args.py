from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schemas of the crawl, classification and search
tools, and translates raw argparse namespaces into domain-compatible
configuration overrides.
"""

import argparse
from typing import Any, Dict

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the crawl tool.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="pyqcrawler",
        description="Crawl a directory-listing server for question papers and classify them.",
    )

    # --- Run Modes ---
    p.add_argument(
        "-t", "--test",
        dest="test_mode",
        action="store_true",
        help="Restrict the crawl to the test subtree and skip persistence (unless --debug).",
    )
    p.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Write dated log files and allow persistence in test mode.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Emit per-decision trace logs.",
    )
    p.add_argument(
        "--test-dir",
        dest="test_dir",
        default=None,
        help="Override the default test subtree.",
    )
    p.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Resolve unclassified files through terminal prompts instead of queueing them.",
    )
    p.add_argument(
        "-l", "--list-only",
        dest="list_only",
        action="store_true",
        help="Enumerate the remote tree without classification or persistence.",
    )

    # --- Locations ---
    p.add_argument("--base-url", dest="base_url", default=None, help="Root URL of the listing server.")
    p.add_argument("--data-dir", dest="data_dir", default=None, help="Knowledge store directory.")
    p.add_argument("--output-dir", dest="output_dir", default=None, help="Directory receiving crawl documents.")
    p.add_argument("--log-dir", dest="log_dir", default=None, help="Directory receiving log files.")

    # --- Network Policy ---
    p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Listing prefetch threads (1 = strictly sequential).",
    )
    p.add_argument("--timeout", dest="request_timeout", type=float, default=None, help="Per-request timeout in seconds.")

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the persisted configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the crawl result as JSON.",
    )

    return p


def build_classify_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the classification tool.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="pyqcrawler-classify",
        description="Resolve queued unclassified papers against the subject knowledge store.",
    )
    p.add_argument("--data-dir", dest="data_dir", default=None, help="Knowledge store directory.")
    p.add_argument(
        "--auto",
        action="store_true",
        help="Map each queued path to its best match without prompting.",
    )
    p.add_argument(
        "--stats",
        action="store_true",
        help="Print knowledge store statistics and exit.",
    )
    p.add_argument(
        "--scan-dir",
        dest="scan_dir",
        default=None,
        help="Also classify PDF files found under a local directory.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Emit per-decision trace logs.")
    p.add_argument("--use-defaults", action="store_true", help="Ignore the persisted configuration file.")
    return p


def build_search_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the search tool.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="pyqcrawler-search",
        description="Search the papers of the last persisted crawl tree.",
    )

    # --- Filters ---
    p.add_argument("-q", "--query", default="", help="Case-insensitive text matched against name and facets.")
    p.add_argument("--year", default="", help="Exact year, e.g. 2016.")
    p.add_argument("--branch", default="", help="Standard branch code, e.g. COMP.")
    p.add_argument("--semester", default="", help="Standard semester label, e.g. \"Semester 5\".")
    p.add_argument("--exam-type", dest="exam_type", default="", help="Standard exam type code, e.g. ESE.")
    p.add_argument("--subject", default="", help="Matched or canonical subject label.")

    # --- Pagination ---
    p.add_argument("--page", type=int, default=1, help="1-based result page.")
    p.add_argument("--per-page", dest="per_page", type=int, default=None, help="Results per page.")

    # --- Sources and Rewriting ---
    p.add_argument("--output-dir", dest="output_dir", default=None, help="Directory holding the crawl documents.")
    p.add_argument(
        "--public-base-url",
        dest="public_base_url",
        default=None,
        help="Serve paper URLs under this prefix instead of the crawled one.",
    )
    p.add_argument(
        "--legacy-base-url",
        dest="legacy_base_url",
        default=None,
        help="Prefix replaced by --public-base-url (defaults to the configured base URL).",
    )

    # --- Alternate Outputs ---
    p.add_argument("--options", action="store_true", help="Print the standard filter values and exit.")
    p.add_argument(
        "--dump-tree",
        dest="dump_tree",
        action="store_true",
        help="Print the stored tree structure with rewritten URLs and exit.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Emit trace logs.")
    p.add_argument("--use-defaults", action="store_true", help="Ignore the persisted configuration file.")
    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Flags only override when set, so persisted settings survive a plain run.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    for key in ("base_url", "test_dir", "data_dir", "output_dir", "log_dir",
                "workers", "request_timeout"):
        overrides[key] = getattr(args, key, None)

    for key in ("test_mode", "debug", "verbose", "interactive", "list_only"):
        if getattr(args, key, False):
            overrides[key] = True

    return overrides
