from __future__ import annotations

"""
Subject Resolution Workflow.

Human-in-the-loop escape hatch for files the matcher cannot classify. The
dialogue is an explicit state machine driven by a pluggable input source,
so the terminal can be swapped for scripted answers or for a non-interactive
decision policy (queue to unclassified, or auto-pick the best suggestion).

States:
    AWAITING_CHOICE -> [AWAITING_CONFIRMATION] -> AWAITING_SUBJECT_NAME
    -> AWAITING_SUBJECT_KEY -> COMMITTED
Terminal alternatives from AWAITING_CHOICE: SKIPPED, EXCLUDED, ABORTED.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

from pyqcrawler.core.classification.knowledge_store import (
    KnowledgeStore,
    normalize_store_path,
    subject_key_from_name,
)
from pyqcrawler.core.classification.matcher import SubjectMatch, normalize_text
from pyqcrawler.core.classification.subject_part import full_name_part
from pyqcrawler.domain.constants import UNKNOWN

logger = logging.getLogger(__name__)

# Only one dialogue may own the terminal at a time
PROMPT_LOCK = threading.Lock()

InputSource = Callable[[str], str]
OutputSink = Callable[[str], None]


class CrawlAborted(Exception):
    """Raised when the user asks to quit the run from a resolution prompt."""


class ResolutionState(Enum):
    AWAITING_CHOICE = "awaiting-choice"
    AWAITING_CONFIRMATION = "awaiting-confirmation"
    AWAITING_SUBJECT_NAME = "awaiting-subject-name"
    AWAITING_SUBJECT_KEY = "awaiting-subject-key"
    COMMITTED = "committed"
    SKIPPED = "skipped"
    EXCLUDED = "excluded"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({
    ResolutionState.COMMITTED,
    ResolutionState.SKIPPED,
    ResolutionState.EXCLUDED,
    ResolutionState.ABORTED,
})


@dataclass(frozen=True)
class Resolution:
    """
    Final outcome of a resolution attempt.

    Attributes:
        state: Terminal state reached.
        subject: Variation text assigned to the file.
        standard_subject: Canonical subject label.
        subject_key: Catalog key, when committed.
    """
    state: ResolutionState
    subject: str = UNKNOWN
    standard_subject: str = UNKNOWN
    subject_key: Optional[str] = None

# -----------------------------------------------------------------------------
# INPUT SOURCES
# -----------------------------------------------------------------------------

class ConsoleInput:
    """Reads answers from standard input; end of input counts as 'skip'."""

    def __call__(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            return "s"


class ScriptedInput:
    """Replays predefined answers; once exhausted every prompt answers 'q'."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = deque(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._answers.popleft() if self._answers else "q"

# -----------------------------------------------------------------------------
# STATE MACHINE
# -----------------------------------------------------------------------------

class ResolutionSession:
    """
    One resolution dialogue for one file.

    Commits go straight to the knowledge store: a new subject when the key
    is new, a variation for the chosen text, and removal of the path from
    the unclassified queue.
    """

    def __init__(
            self,
            store: KnowledgeStore,
            path: str,
            file_name: str,
            input_source: InputSource,
            *,
            suggestions: Sequence[SubjectMatch] = (),
            output: Optional[OutputSink] = None,
    ) -> None:
        self.store = store
        self.path = normalize_store_path(path)
        self.file_name = file_name
        self.suggestions = list(suggestions)
        self.state = ResolutionState.AWAITING_CHOICE

        self._ask = input_source
        self._say = output or print
        self._default_part = full_name_part(file_name)
        self._part = ""
        self._subject_name = ""
        self._result: Optional[Resolution] = None

    def run(self) -> Resolution:
        """
        Drive the dialogue to a terminal state.

        Raises:
            CrawlAborted: If the user chose to quit.
        """
        with PROMPT_LOCK:
            self._say(f"\nFile: {self.file_name}")
            self._say(f"Path: {self.path}")
            while not self.state.is_terminal:
                self.step()

        if self.state is ResolutionState.ABORTED:
            raise CrawlAborted(f"Run aborted by user at {self.path}")
        if self._result is None:
            raise RuntimeError(f"Resolution reached {self.state.value} without a recorded outcome.")
        return self._result

    def step(self) -> None:
        """Ask the prompt of the current state and apply the answer."""
        handler = {
            ResolutionState.AWAITING_CHOICE: self._on_choice,
            ResolutionState.AWAITING_CONFIRMATION: self._on_confirmation,
            ResolutionState.AWAITING_SUBJECT_NAME: self._on_subject_name,
            ResolutionState.AWAITING_SUBJECT_KEY: self._on_subject_key,
        }[self.state]
        handler()

    # -------------------------------------------------------------------------
    # State handlers
    # -------------------------------------------------------------------------

    def _on_choice(self) -> None:
        if self.suggestions:
            self._say("Possible subject matches:")
            for i, match in enumerate(self.suggestions, start=1):
                self._say(f"  {i}. {match.standard} ({match.subject_key})")
            prompt = (
                f'Select a match number, "n" for none, or type the file name part '
                f'[{self._default_part}] (or "s" to skip, "q" to quit, "e" to exclude, '
                f'"f" to use file name): '
            )
        else:
            prompt = (
                f'File name part [{self._default_part}] (or "s" to skip, "q" to quit, '
                f'"e" to exclude, "f" to use file name): '
            )

        answer = self._ask(prompt).strip()
        command = answer.lower()

        if command == "s":
            self.store.add_unclassified(self.path)
            self._finish(ResolutionState.SKIPPED)
        elif command == "e":
            self.store.add_exclusion(self.path)
            self._finish(ResolutionState.EXCLUDED)
        elif command == "q":
            self.state = ResolutionState.ABORTED
        elif command in ("", "n", "f"):
            self._part = self._default_part
            self.state = ResolutionState.AWAITING_SUBJECT_NAME
        elif answer.isdigit() and self.suggestions:
            self._select_suggestion(int(answer))
        else:
            self._part = normalize_text(answer)
            if not self._part:
                return
            if self._part in normalize_text(self._default_part):
                self.state = ResolutionState.AWAITING_SUBJECT_NAME
            else:
                self.state = ResolutionState.AWAITING_CONFIRMATION

    def _on_confirmation(self) -> None:
        answer = self._ask(f'"{self._part}" was not found in the file name. Use it anyway? (y/n): ')
        if answer.strip().lower() in ("y", "yes"):
            self.state = ResolutionState.AWAITING_SUBJECT_NAME
        else:
            self.state = ResolutionState.AWAITING_CHOICE

    def _on_subject_name(self) -> None:
        default = self._part.title()
        answer = self._ask(f"Subject name [{default}]: ").strip()
        self._subject_name = answer or default
        self.state = ResolutionState.AWAITING_SUBJECT_KEY

    def _on_subject_key(self) -> None:
        default = subject_key_from_name(self._subject_name)
        answer = self._ask(f"Subject key [{default}]: ").strip()
        key = subject_key_from_name(answer) if answer else default
        if not key:
            self._say("Subject key must contain letters or digits.")
            return
        self._commit(key)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _select_suggestion(self, number: int) -> None:
        if not 1 <= number <= len(self.suggestions):
            self._say("Invalid selection.")
            return
        match = self.suggestions[number - 1]
        self.store.add_mapping(self.path, match.subject_key)
        self._finish(ResolutionState.COMMITTED, match.variation, match.standard, match.subject_key)

    def _commit(self, key: str) -> None:
        created = self.store.add_subject(key, self._subject_name)
        if not created:
            logger.info(f"Resolver: Reusing existing subject {key}")
        self.store.add_variation(self._part, key)
        self.store.add_mapping(self.path, key)
        standard = self.store.get_standard(key) or self._subject_name
        self._say(f"Classified as: {standard} ({key})")
        self._finish(ResolutionState.COMMITTED, self._part, standard, key)

    def _finish(
            self,
            state: ResolutionState,
            subject: str = UNKNOWN,
            standard: str = UNKNOWN,
            key: Optional[str] = None,
    ) -> None:
        self.state = state
        self._result = Resolution(state, subject, standard, key)
        logger.debug(f"Resolver: {self.path} -> {state.value}")

# -----------------------------------------------------------------------------
# DECISION POLICIES
# -----------------------------------------------------------------------------

class QueuePolicy:
    """Non-interactive: unresolved files go to the unclassified queue."""

    def resolve(
            self,
            store: KnowledgeStore,
            path: str,
            file_name: str,
            suggestions: Sequence[SubjectMatch] = (),
    ) -> Resolution:
        store.add_unclassified(path)
        return Resolution(ResolutionState.SKIPPED)


class BestMatchPolicy(QueuePolicy):
    """Non-interactive: take the top suggestion when one exists, else queue."""

    def resolve(
            self,
            store: KnowledgeStore,
            path: str,
            file_name: str,
            suggestions: Sequence[SubjectMatch] = (),
    ) -> Resolution:
        if not suggestions:
            return super().resolve(store, path, file_name, suggestions)
        best = suggestions[0]
        store.add_mapping(path, best.subject_key)
        return Resolution(ResolutionState.COMMITTED, best.variation, best.standard, best.subject_key)


class InteractivePolicy:
    """Runs a ResolutionSession against an input source."""

    def __init__(self, input_source: Optional[InputSource] = None, output: Optional[OutputSink] = None) -> None:
        self.input_source = input_source or ConsoleInput()
        self.output = output

    def resolve(
            self,
            store: KnowledgeStore,
            path: str,
            file_name: str,
            suggestions: Sequence[SubjectMatch] = (),
    ) -> Resolution:
        session = ResolutionSession(
            store, path, file_name, self.input_source,
            suggestions=suggestions, output=self.output,
        )
        return session.run()
