from __future__ import annotations

"""
Unit tests for the subject resolution workflow.

Drives the resolution state machine with scripted answers and checks both
the terminal outcome and the knowledge store side effects.
"""

from typing import List

import pytest

from pyqcrawler.core.classification.knowledge_store import KnowledgeStore
from pyqcrawler.core.classification.matcher import SubjectMatch
from pyqcrawler.core.classification.resolver import (
    BestMatchPolicy,
    CrawlAborted,
    InteractivePolicy,
    QueuePolicy,
    ResolutionSession,
    ResolutionState,
    ScriptedInput,
)

PATH = "2016/FE_CHEM_2016.pdf"
FILE_NAME = "FE_CHEM_2016.pdf"
PHYSICS = SubjectMatch("PHYSICS", "PHY", "Engineering Physics")


def _session(store: KnowledgeStore, answers: List[str], suggestions=()) -> ResolutionSession:
    lines: List[str] = []
    session = ResolutionSession(
        store, PATH, FILE_NAME, ScriptedInput(answers),
        suggestions=suggestions, output=lines.append,
    )
    session.lines = lines
    return session

# -----------------------------------------------------------------------------
# TERMINAL CHOICES
# -----------------------------------------------------------------------------

def test_skip_queues_path(seeded_store: KnowledgeStore) -> None:
    """TC-01: 's' leaves the file unclassified and queued."""
    result = _session(seeded_store, ["s"]).run()

    assert result.state is ResolutionState.SKIPPED
    assert seeded_store.is_unclassified(PATH)


def test_exclude_records_exclusion(seeded_store: KnowledgeStore) -> None:
    """TC-02: 'e' excludes the path permanently."""
    seeded_store.add_unclassified(PATH)
    result = _session(seeded_store, ["e"]).run()

    assert result.state is ResolutionState.EXCLUDED
    assert seeded_store.is_excluded(PATH)
    assert not seeded_store.is_unclassified(PATH)


def test_quit_raises_abort(seeded_store: KnowledgeStore) -> None:
    """TC-03: 'q' aborts the whole run."""
    with pytest.raises(CrawlAborted):
        _session(seeded_store, ["q"]).run()


def test_exhausted_script_aborts(seeded_store: KnowledgeStore) -> None:
    with pytest.raises(CrawlAborted):
        _session(seeded_store, []).run()


def test_terminal_state_without_outcome_raises(seeded_store: KnowledgeStore) -> None:
    session = _session(seeded_store, [])
    session.state = ResolutionState.SKIPPED

    with pytest.raises(RuntimeError, match="without a recorded outcome"):
        session.run()

# -----------------------------------------------------------------------------
# NEW SUBJECT FLOW
# -----------------------------------------------------------------------------

def test_default_part_creates_subject(seeded_store: KnowledgeStore) -> None:
    """TC-04: Accepting the default part, naming a subject, default key."""
    seeded_store.add_unclassified(PATH)
    result = _session(seeded_store, ["", "Engineering Chemistry", ""]).run()

    assert result.state is ResolutionState.COMMITTED
    assert result.subject == "FE CHEM 2016"
    assert result.standard_subject == "Engineering Chemistry"
    assert result.subject_key == "ENGINEERING_CHEMISTRY"
    assert seeded_store.variations["FE CHEM 2016"] == "ENGINEERING_CHEMISTRY"
    assert seeded_store.get_standard("ENGINEERING_CHEMISTRY") == "Engineering Chemistry"
    assert not seeded_store.is_unclassified(PATH)


def test_typed_part_from_file_name(seeded_store: KnowledgeStore) -> None:
    """TC-05: A typed part found in the file name skips confirmation."""
    session = _session(seeded_store, ["chem", "", "CHEM"])
    result = session.run()

    assert result.subject == "CHEM"
    assert result.standard_subject == "Chem"
    assert seeded_store.variations["CHEM"] == "CHEM"


def test_foreign_part_requires_confirmation(seeded_store: KnowledgeStore) -> None:
    """TC-06: Declining the confirmation returns to the first prompt."""
    session = _session(seeded_store, ["chemistry", "n", "s"])
    result = session.run()

    assert result.state is ResolutionState.SKIPPED
    assert len(session._ask.prompts) == 3
    assert "was not found in the file name" in session._ask.prompts[1]


def test_foreign_part_confirmed(seeded_store: KnowledgeStore) -> None:
    result = _session(seeded_store, ["chemistry", "yes", "Chemistry", "chem lab"]).run()

    assert result.state is ResolutionState.COMMITTED
    assert result.subject == "CHEMISTRY"
    assert result.subject_key == "CHEM_LAB"


def test_existing_key_is_reused(seeded_store: KnowledgeStore) -> None:
    """TC-07: Committing to a known key keeps its canonical label."""
    result = _session(seeded_store, ["", "Whatever", "PHY"]).run()

    assert result.standard_subject == "Engineering Physics"
    assert seeded_store.variations["FE CHEM 2016"] == "PHY"

# -----------------------------------------------------------------------------
# SUGGESTIONS
# -----------------------------------------------------------------------------

def test_pick_suggestion(seeded_store: KnowledgeStore) -> None:
    """TC-08: A number selects a suggested subject directly."""
    seeded_store.add_unclassified(PATH)
    session = _session(seeded_store, ["1"], suggestions=[PHYSICS])
    result = session.run()

    assert result.state is ResolutionState.COMMITTED
    assert result.standard_subject == "Engineering Physics"
    assert result.subject_key == "PHY"
    assert not seeded_store.is_unclassified(PATH)
    assert any("1. Engineering Physics (PHY)" in line for line in session.lines)


def test_invalid_suggestion_number(seeded_store: KnowledgeStore) -> None:
    session = _session(seeded_store, ["7", "s"], suggestions=[PHYSICS])
    result = session.run()

    assert result.state is ResolutionState.SKIPPED
    assert "Invalid selection." in session.lines

# -----------------------------------------------------------------------------
# POLICIES
# -----------------------------------------------------------------------------

def test_queue_policy(seeded_store: KnowledgeStore) -> None:
    result = QueuePolicy().resolve(seeded_store, PATH, FILE_NAME, [PHYSICS])

    assert result.state is ResolutionState.SKIPPED
    assert seeded_store.is_unclassified(PATH)


def test_best_match_policy(seeded_store: KnowledgeStore) -> None:
    """TC-09: The top suggestion is committed without prompting."""
    result = BestMatchPolicy().resolve(seeded_store, PATH, FILE_NAME, [PHYSICS])

    assert result.state is ResolutionState.COMMITTED
    assert result.subject == "PHYSICS"
    assert not seeded_store.is_unclassified(PATH)


def test_best_match_policy_without_suggestions_queues(seeded_store: KnowledgeStore) -> None:
    result = BestMatchPolicy().resolve(seeded_store, PATH, FILE_NAME, [])

    assert result.state is ResolutionState.SKIPPED
    assert seeded_store.is_unclassified(PATH)


def test_interactive_policy_runs_session(seeded_store: KnowledgeStore) -> None:
    lines: List[str] = []
    policy = InteractivePolicy(ScriptedInput(["e"]), output=lines.append)

    result = policy.resolve(seeded_store, PATH, FILE_NAME)

    assert result.state is ResolutionState.EXCLUDED
    assert f"File: {FILE_NAME}" in "\n".join(lines)


def test_terminal_states() -> None:
    assert ResolutionState.COMMITTED.is_terminal
    assert ResolutionState.ABORTED.is_terminal
    assert not ResolutionState.AWAITING_SUBJECT_KEY.is_terminal
