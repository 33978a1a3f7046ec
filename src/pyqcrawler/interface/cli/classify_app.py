from __future__ import annotations

"""
Classification Tool Controller.

Works through the unclassified queue (and optionally a local directory of
PDFs), offering the best knowledge-store matches for each file and driving
the resolution dialogue, or mapping best matches automatically in --auto
mode. Also reports knowledge store statistics.
"""

import os
import sys
from typing import Dict, List, Optional

from pyqcrawler.core.classification.classifier import SubjectClassifier
from pyqcrawler.core.classification.knowledge_store import KnowledgeStore
from pyqcrawler.core.classification.resolver import (
    BestMatchPolicy,
    ConsoleInput,
    CrawlAborted,
    InputSource,
    ResolutionSession,
    ResolutionState,
)
from pyqcrawler.core.pipeline.validator import validate_config
from pyqcrawler.domain.config import get_default_config, load_config
from pyqcrawler.infra.logging import LoggingConfig, configure_logging, get_logger
from pyqcrawler.interface.cli import args as cli_args

logger = get_logger(__name__)


def main(argv: Optional[List[str]] = None, input_source: Optional[InputSource] = None) -> int:
    """
    Execute the classification tool.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.
        input_source: Answer source for prompts, the terminal by default.

    Returns:
        int: Process exit code (0 success, 130 quit).
    """
    args = cli_args.build_classify_parser().parse_args(argv)
    configure_logging(LoggingConfig.for_run(verbose=args.verbose))

    base_conf = get_default_config() if args.use_defaults else load_config()
    if args.data_dir:
        base_conf["data_dir"] = args.data_dir
    cfg, warnings = validate_config(base_conf)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    store = KnowledgeStore(cfg["data_dir"]).load()

    if args.stats:
        print_statistics(store)
        return 0

    files = list(store.unclassified)
    if args.scan_dir:
        files.extend(p for p in scan_pdf_files(args.scan_dir) if p not in files)

    if not files:
        print("No unclassified files found.")
        return 0

    try:
        counts = process_files(files, store, auto=args.auto, input_source=input_source or ConsoleInput())
    except CrawlAborted:
        print("\nStopped. Progress so far has been saved.")
        print_statistics(store)
        return 130

    print(
        f"\nProcessed {counts['processed']}/{len(files)} files: "
        f"{counts['classified']} classified, {counts['excluded']} excluded, "
        f"{counts['queued']} left unclassified."
    )
    return 0


def scan_pdf_files(directory: str) -> List[str]:
    """Collect PDF files under a local directory, sorted, as '/'-separated paths."""
    found: List[str] = []
    for root, dirs, names in os.walk(directory):
        dirs.sort()
        for name in sorted(names):
            if name.lower().endswith(".pdf"):
                found.append(os.path.join(root, name).replace("\\", "/"))
    return found


def process_files(
        files: List[str],
        store: KnowledgeStore,
        *,
        auto: bool = False,
        input_source: InputSource,
        output=print,
) -> Dict[str, int]:
    """
    Classify each file path, one decision per path.

    Raises:
        CrawlAborted: If the user quits from a prompt.
    """
    classifier = SubjectClassifier(store)
    auto_policy = BestMatchPolicy()
    counts = {"processed": 0, "classified": 0, "excluded": 0, "queued": 0}
    total = len(files)

    for path in files:
        counts["processed"] += 1
        if store.is_excluded(path):
            continue

        file_name = os.path.basename(path)
        output(f"\nFile {counts['processed']}/{total} ({round(100 * counts['processed'] / total)}%)")
        matches = classifier.match_file(file_name) or classifier.suggestions(file_name)

        if auto:
            resolution = auto_policy.resolve(store, path, file_name, matches)
            if resolution.state is ResolutionState.COMMITTED:
                output(f"Auto-classifying as: {resolution.standard_subject} ({resolution.subject_key})")
        else:
            session = ResolutionSession(
                store, path, file_name, input_source,
                suggestions=matches, output=output,
            )
            resolution = session.run()

        if resolution.state is ResolutionState.COMMITTED:
            counts["classified"] += 1
        elif resolution.state is ResolutionState.EXCLUDED:
            counts["excluded"] += 1
        else:
            counts["queued"] += 1

    return counts


def print_statistics(store: KnowledgeStore) -> None:
    stats = store.get_stats()
    total = stats["variations"] + stats["exclusions"] + stats["unclassified"]
    print("Classification Status\n")
    print(f"Subjects: {stats['subjects']}")
    print(f"Variations: {stats['variations']}")
    print(f"Exclusions: {stats['exclusions']}")
    print(f"Unclassified: {stats['unclassified']}")
    print(f"\nProgress: {stats['progress']}% complete ({stats['variations']}/{total})")


if __name__ == "__main__":
    sys.exit(main())
