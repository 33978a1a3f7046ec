from __future__ import annotations

"""
Subject Classifier Facade.

Combines the variation matcher, the noise-stripping second pass and a
decision policy for unresolved files into the single entry point the crawl
engine calls for every PDF.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from pyqcrawler.core.classification.knowledge_store import KnowledgeStore
from pyqcrawler.core.classification.matcher import SubjectMatch
from pyqcrawler.core.classification.resolver import (
    BestMatchPolicy,
    InputSource,
    InteractivePolicy,
    QueuePolicy,
    Resolution,
    ResolutionState,
)
from pyqcrawler.core.classification.subject_part import extract_subject_part, full_name_part
from pyqcrawler.domain.constants import UNKNOWN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubjectDecision:
    """
    Classification outcome for one file.

    Attributes:
        subject: Matched variation, or 'Unknown'.
        standard_subject: Canonical label, or 'Unknown'.
        excluded: True if the user excluded the path during resolution.
        queued: True if the path was left in the unclassified queue.
    """
    subject: str = UNKNOWN
    standard_subject: str = UNKNOWN
    excluded: bool = False
    queued: bool = False


class SubjectClassifier:
    """
    Classifies file names against a knowledge store.

    The policy decides what happens when no variation matches: queue the
    path (default), pick the best weak suggestion, or ask a human.
    """

    def __init__(self, store: KnowledgeStore, policy=None) -> None:
        self.store = store
        self.policy = policy or QueuePolicy()

    def classify(self, fragment: str) -> List[SubjectMatch]:
        """Return every accepted variation for a fragment, longest first."""
        return self.store.find_matches(fragment)

    def match_file(self, file_name: str) -> List[SubjectMatch]:
        """
        Match a file name, retrying on the noise-stripped residue.

        Args:
            file_name: Listed PDF file name.

        Returns:
            List[SubjectMatch]: Matches of the first pass that produced any.
        """
        matches = self.classify(full_name_part(file_name))
        if matches:
            return matches

        residue = extract_subject_part(file_name)
        if not residue:
            return []
        logger.debug(f"Classifier: Retrying '{file_name}' with residue '{residue}'")
        return self.classify(residue)

    def suggestions(self, file_name: str, limit: int = 5) -> List[SubjectMatch]:
        """Weak candidates sharing a word with the residue, one per subject."""
        residue = extract_subject_part(file_name) or full_name_part(file_name)
        seen = set()
        out: List[SubjectMatch] = []
        for match in self.store.find_partial_matches(residue):
            if match.subject_key not in seen:
                seen.add(match.subject_key)
                out.append(match)
        return out[:limit]

    def resolve(self, store_path: str, file_name: str) -> SubjectDecision:
        """
        Classify a file, falling back to the policy when nothing matches.

        Args:
            store_path: Path recorded in the knowledge store for this file.
            file_name: Listed PDF file name.

        Returns:
            SubjectDecision: Subject labels and queue flags.

        Raises:
            CrawlAborted: If an interactive policy was told to quit.
        """
        matches = self.match_file(file_name)
        if matches:
            best = matches[0]
            logger.debug(f"Classifier: '{file_name}' -> {best.standard} via '{best.variation}'")
            # Queued by an earlier run before the dictionary learned this subject
            if self.store.is_unclassified(store_path):
                self.store.add_mapping(store_path, best.subject_key)
            return SubjectDecision(best.variation, best.standard)

        logger.debug(f"Classifier: No match for '{file_name}', deferring to {type(self.policy).__name__}")
        resolution: Resolution = self.policy.resolve(
            self.store, store_path, file_name, self.suggestions(file_name)
        )
        return _decision_from(resolution)


def _decision_from(resolution: Resolution) -> SubjectDecision:
    if resolution.state is ResolutionState.COMMITTED:
        return SubjectDecision(resolution.subject, resolution.standard_subject)
    if resolution.state is ResolutionState.EXCLUDED:
        return SubjectDecision(excluded=True)
    return SubjectDecision(queued=True)


def build_policy(interactive: bool, auto: bool = False, input_source: Optional[InputSource] = None):
    """Select the unresolved-file policy for a run mode."""
    if interactive:
        return InteractivePolicy(input_source)
    if auto:
        return BestMatchPolicy()
    return QueuePolicy()
