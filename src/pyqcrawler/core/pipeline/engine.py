from __future__ import annotations

"""
Core crawl orchestration.

This module coordinates the entire crawl workflow:
1. Validates configuration and resolves the start URL.
2. Loads the subject knowledge store and selects the resolution policy.
3. Traverses the remote listing depth-first (directories, then files).
4. Extracts metadata, classifies subjects and builds both result views.
5. Breaks tree cycles and hands the documents to the persistence sink.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from pyqcrawler.core.classification.classifier import SubjectClassifier, build_policy
from pyqcrawler.core.classification.knowledge_store import KnowledgeStore
from pyqcrawler.core.classification.resolver import CrawlAborted, InputSource
from pyqcrawler.core.extraction.metadata import MetadataExtractor
from pyqcrawler.core.pipeline.inventory import dump_inventory, get_nested_entries, summarize_inventory
from pyqcrawler.core.pipeline.validator import validate_config
from pyqcrawler.core.services.persistence import (
    DocumentSink,
    JsonDocumentSink,
    PersistenceError,
    build_tree_document,
)
from pyqcrawler.core.tree.builder import clean_tree, has_cyclic_reference, insert
from pyqcrawler.domain.crawl_models import CrawlResult, create_error_result, create_success_result
from pyqcrawler.domain.paper_models import DirectoryEntry, Paper, PaperCollection
from pyqcrawler.domain.tree_models import DirectoryNode, create_root
from pyqcrawler.infra.network.listing_client import ListingClient, relative_path

logger = logging.getLogger(__name__)

SUMMARY_LIST_LIMIT = 100

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_start_url(cfg: Dict[str, Any]) -> str:
    """Return the listing root, or the test subtree below it in test mode."""
    base_url = cfg["base_url"]
    if not cfg.get("test_mode"):
        return base_url
    return base_url.rstrip("/") + "/" + cfg["test_dir"].lstrip("/")


def run_crawl(
        config: Optional[Dict[str, Any]],
        *,
        client: Optional[ListingClient] = None,
        store: Optional[KnowledgeStore] = None,
        sink: Optional[DocumentSink] = None,
        input_source: Optional[InputSource] = None,
) -> CrawlResult:
    """
    Execute a full crawl (or a list-only enumeration).

    Args:
        config: The configuration dictionary (raw or partial).
        client: Listing client override; a pooled one is created otherwise.
        store: Knowledge store override; loaded from 'data_dir' otherwise.
        sink: Persistence sink override; JSON files in 'output_dir' otherwise.
        input_source: Answer source for the interactive resolver.

    Returns:
        CrawlResult: Status, persisted paths and summary.

    Raises:
        PersistenceError: If results could not be stored.
    """
    logger.info("Crawl execution started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    start_url = resolve_start_url(cfg)
    logger.info(
        f"Base URL: {start_url} | test={cfg['test_mode']} debug={cfg['debug']} "
        f"list_only={cfg['list_only']} interactive={cfg['interactive']}"
    )

    owns_client = client is None
    if client is None:
        client = ListingClient(
            cfg["base_url"],
            timeout=cfg["request_timeout"],
            max_retries=cfg["max_retries"],
            backoff_factor=cfg["backoff_factor"],
            pool_size=max(4, cfg["workers"]),
        )

    try:
        if cfg["list_only"]:
            return _run_list_only(cfg, client, start_url)

        store = store or KnowledgeStore(cfg["data_dir"]).load()
        classifier = SubjectClassifier(store, build_policy(cfg["interactive"], input_source=input_source))
        crawler = Crawler(cfg, client, store, classifier, start_url)

        should_persist = not cfg["test_mode"] or cfg["debug"]
        if should_persist and sink is None:
            sink = JsonDocumentSink(cfg["output_dir"])

        try:
            crawler.crawl()
        except CrawlAborted as e:
            logger.warning(f"Crawl aborted by user: {e}")
            paths: Dict[str, str] = {}
            if should_persist and sink is not None:
                logger.info("Flushing partial results before exit.")
                paths = persist_results(crawler.collection, crawler.root, sink)
            return create_error_result(
                str(e), cfg, start_url,
                aborted=True,
                persisted=bool(paths),
                output_paths=paths,
                summary_extra=crawler.summary(),
            )

        summary = crawler.summary()
        logger.info(
            f"Crawling complete: {summary['totalFiles']} files, "
            f"{summary['totalDirectories']} directories."
        )

        paths = {}
        if should_persist and sink is not None:
            paths = persist_results(crawler.collection, crawler.root, sink)
        else:
            logger.info("Test mode: Skipping persistence (use --debug to save).")

        return create_success_result(
            cfg, start_url,
            persisted=bool(paths),
            output_paths=paths,
            summary_extra=summary,
        )
    finally:
        if owns_client:
            client.close()


def persist_results(collection: PaperCollection, root: DirectoryNode, sink: DocumentSink) -> Dict[str, str]:
    """
    Clean the tree and replace both stored documents.

    Raises:
        PersistenceError: If the cleaned tree still holds a cycle or a write fails.
    """
    structure = clean_tree(root)
    if has_cyclic_reference(structure):
        raise PersistenceError("Cleaned tree still contains cyclic references.")

    return {
        "papers": sink.save_collection(collection.to_document()),
        "tree": sink.save_tree(build_tree_document(structure)),
    }


def build_summary(collection: PaperCollection, root: DirectoryNode) -> Dict[str, Any]:
    """
    Summarize a crawl: counts, unique facet values and root stats.

    Subject lists longer than the display limit are truncated with a tail
    entry naming how many values were left out.
    """
    meta = collection.meta
    return {
        "totalFiles": collection.total_files,
        "totalDirectories": collection.total_directories,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
        "uniqueBranches": len(meta["branches"]),
        "uniqueYears": len(meta["years"]),
        "uniqueExamTypes": len(meta["examTypes"]),
        "uniqueSemesters": len(meta["semesters"]),
        "uniqueSubjects": len(meta["subjects"]),
        "uniqueStandardSubjects": len(meta["standardSubjects"]),
        "uniqueBranchValues": list(meta["branches"]),
        "uniqueYearValues": list(meta["years"]),
        "uniqueExamTypeValues": list(meta["examTypes"]),
        "uniqueSemesterValues": list(meta["semesters"]),
        "uniqueSubjectValues": _truncate(meta["subjects"]),
        "uniqueStandardSubjectValues": _truncate(meta["standardSubjects"]),
        "directoryStats": root.stats.to_dict(),
    }


def _truncate(values: List[str], limit: int = SUMMARY_LIST_LIMIT) -> List[str]:
    if len(values) <= limit:
        return list(values)
    return values[:limit] + [f"... {len(values) - limit} more items"]

# -----------------------------------------------------------------------------
# CRAWLER
# -----------------------------------------------------------------------------

class Crawler:
    """
    Depth-first traversal state for one run.

    All tree and collection mutation happens on the calling thread. With
    more than one worker, sibling listings are prefetched on a thread pool
    while earlier siblings are being processed.
    """

    def __init__(
            self,
            cfg: Dict[str, Any],
            client: ListingClient,
            store: KnowledgeStore,
            classifier: SubjectClassifier,
            start_url: str,
    ) -> None:
        self.cfg = cfg
        self.client = client
        self.store = store
        self.classifier = classifier
        self.start_url = start_url

        self.base_url = cfg["base_url"]
        self.base_path = cfg["base_path"]
        self.extractor = MetadataExtractor(cfg["min_year"], cfg["max_year"], self.base_path)

        self.collection = PaperCollection()
        self.root = create_root(start_url)

        self.excluded = 0
        self.queued = 0
        self.errors = 0

        self._visited: Set[str] = set()
        self._pool: Optional[ThreadPoolExecutor] = None

    def crawl(self) -> None:
        """
        Traverse everything below the start URL.

        Raises:
            CrawlAborted: Propagated from the interactive resolver.
        """
        workers = int(self.cfg.get("workers", 1))
        if workers <= 1:
            self._crawl_directory(self.start_url, self.client.fetch(self.start_url))
            return

        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ListingPrefetch")
        try:
            self._crawl_directory(self.start_url, self.client.fetch(self.start_url))
        finally:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None

    def summary(self) -> Dict[str, Any]:
        out = build_summary(self.collection, self.root)
        out["excludedFiles"] = self.excluded
        out["unclassifiedFiles"] = self.queued
        out["errors"] = self.errors
        return out

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _crawl_directory(self, url: str, entries: List[DirectoryEntry]) -> None:
        self._visited.add(url)
        logger.debug(f"Crawl: {len(entries)} raw items at {url}")

        directories = [e for e in entries if e.is_directory and e.path not in self._visited]
        files = [e for e in entries if not e.is_directory and e.path.lower().endswith(".pdf")]
        pending = self._prefetch(directories)

        for entry in directories:
            try:
                self._visit_directory(entry, pending.get(entry.path))
            except CrawlAborted:
                raise
            except Exception as e:
                self.errors += 1
                logger.error(f"Crawl: Error processing directory {entry.path} ({entry.name}): {e}", exc_info=True)

        for entry in files:
            try:
                self._process_file(entry)
            except CrawlAborted:
                raise
            except Exception as e:
                self.errors += 1
                logger.error(f"Crawl: Error processing file {entry.path} ({entry.name}): {e}", exc_info=True)

    def _prefetch(self, directories: List[DirectoryEntry]) -> Dict[str, Future]:
        if self._pool is None:
            return {}
        return {d.path: self._pool.submit(self.client.fetch, d.path) for d in directories}

    def _visit_directory(self, entry: DirectoryEntry, listing: Optional[Future]) -> None:
        if entry.path in self._visited:
            return
        self.collection.total_directories += 1

        record = self.extractor.directory_record(entry.path, entry.name)
        logger.debug(f"Crawl: Adding directory {record.file_name}: {record.to_dict()}")
        insert(self.root, record, True, self.base_path)

        children = listing.result() if listing is not None else self.client.fetch(entry.path)
        self._crawl_directory(entry.path, children)

    def _process_file(self, entry: DirectoryEntry) -> None:
        store_path = relative_path(entry.path, self.base_url)
        if self.store.is_excluded(store_path):
            self.excluded += 1
            logger.info(f"Crawl: Skipping excluded file {entry.name}")
            return

        fields = self.extractor.extract(entry.path, entry.name)
        decision = self.classifier.resolve(store_path, entry.name)
        if decision.excluded:
            self.excluded += 1
            return
        if decision.queued:
            self.queued += 1

        paper = Paper(
            file_name=entry.name,
            url=entry.path,
            subject=decision.subject,
            standard_subject=decision.standard_subject,
            **fields,
        )
        self.collection.add_paper(paper)
        insert(self.root, paper, False, self.base_path)
        logger.debug(f"Crawl: Added file {entry.name}: {paper.to_dict()}")

# -----------------------------------------------------------------------------
# LIST-ONLY MODE
# -----------------------------------------------------------------------------

def _run_list_only(cfg: Dict[str, Any], client: ListingClient, start_url: str) -> CrawlResult:
    logger.info("List Only mode: Fetching all files without processing or storing...")
    items = get_nested_entries(client, start_url)
    summary = summarize_inventory(items)
    logger.info(
        f"Found {summary['totalItems']} total items "
        f"({summary['files']} files, {summary['directories']} directories)."
    )

    paths: Dict[str, str] = {}
    if cfg["test_mode"]:
        try:
            paths["inventory"] = dump_inventory(items, cfg["log_dir"])
        except OSError as e:
            logger.error(f"Failed to save file list to {cfg['log_dir']}: {e}")

    return create_success_result(cfg, start_url, output_paths=paths, inventory=items, summary_extra=summary)
