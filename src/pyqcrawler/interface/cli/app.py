from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the crawl tool lifecycle: initialization of logging, loading
and merging of configuration sources (defaults, persistent storage and CLI
overrides), crawl execution, and result rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pyqcrawler.core.pipeline.engine import run_crawl
from pyqcrawler.core.pipeline.validator import validate_config
from pyqcrawler.core.services.persistence import PersistenceError
from pyqcrawler.domain.config import get_default_config, load_config
from pyqcrawler.domain.crawl_models import CrawlResult
from pyqcrawler.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
)
from pyqcrawler.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_CONFIG = 2
EXIT_INTERRUPTED = 130

MERGEABLE_KEYS = [
    "base_url", "test_dir", "data_dir", "output_dir", "log_dir",
    "workers", "request_timeout",
    "test_mode", "debug", "verbose", "interactive", "list_only",
]

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the crawl tool workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad config, 130 quit).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console only until the log directory is known)
    configure_logging(LoggingConfig.for_run(verbose=args.verbose))
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (Default vs Persistent state)
    base_conf = get_default_config() if args.use_defaults else load_config()

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    try:
        clean_conf, warnings = validate_config(raw_conf, strict=False)
    except (TypeError, ValueError) as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 6. Full logging setup (dated files in debug mode)
    setup_logging(clean_conf)

    # 7. Crawl execution phase
    try:
        result = run_crawl(clean_conf)
    except KeyboardInterrupt:
        logger.warning("Crawl interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except PersistenceError as e:
        logger.critical(f"Persistence failed: {e}", exc_info=True)
        print(f"ERROR: Persistence failed: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        logger.critical(f"Crawl failed: {e}", exc_info=True)
        print(f"ERROR: Crawl failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    if result.aborted:
        return EXIT_INTERRUPTED
    return EXIT_OK if result.ok else EXIT_FAILURE


def setup_logging(cfg: Dict[str, Any]) -> None:
    """Reconfigure logging for a resolved config: level from 'verbose', files from 'debug'."""
    log_cfg = LoggingConfig.for_run(
        verbose=bool(cfg.get("verbose")),
        debug=bool(cfg.get("debug")),
        log_dir=cfg.get("log_dir"),
    )
    configure_logging(log_cfg, force=True)
    if log_cfg.log_file:
        logger.info(f"Logging to {log_cfg.log_file} (errors: {log_cfg.error_log_file})")

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None values leave the base untouched.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in MERGEABLE_KEYS:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: CrawlResult) -> None:
    """
    Format and print the crawl result to the standard output.

    Args:
        result: The crawl result to render.
    """
    summary = result.summary

    if result.aborted:
        print(f"Crawl aborted: {result.error}", file=sys.stderr)
    elif not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return
    else:
        print("Crawling complete!")

    print(f"Base URL: {result.start_url}")

    if result.list_only:
        print(f"Found {summary.get('totalItems', 0)} total items.")
        print(f"Files: {summary.get('files', 0)}")
        print(f"Directories: {summary.get('directories', 0)}")
    else:
        print("Summary:")
        print(json.dumps(summary, ensure_ascii=False, indent=2))

    if result.output_paths:
        print("\nGenerated files:")
        for k, v in result.output_paths.items():
            print(f"  - {k}: {v}")
    elif not result.list_only:
        print("Results were not persisted.")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
