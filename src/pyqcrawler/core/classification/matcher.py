from __future__ import annotations

"""
Subject Variation Matcher.

Scores a normalized file-name fragment against the variation dictionary.
A variation matches when any strategy accepts it: exact equality, equality
ignoring whitespace, substring containment, a whole input word equal to the
variation, or every word of a multi-word variation appearing in the input.
Results are ordered most-specific (longest variation) first.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping

logger = logging.getLogger(__name__)

_PUNCTUATION_RX = re.compile(r"[^\w\s]|_")
_WHITESPACE_RX = re.compile(r"\s+")


@dataclass(frozen=True)
class SubjectMatch:
    """
    A variation accepted for an input fragment.

    Attributes:
        variation: Normalized variation text.
        subject_key: Catalog key the variation maps to.
        standard: Canonical subject label.
    """
    variation: str
    subject_key: str
    standard: str


def normalize_text(text: str) -> str:
    """Upper-case, turn punctuation into spaces and collapse whitespace."""
    return _WHITESPACE_RX.sub(" ", _PUNCTUATION_RX.sub(" ", (text or "").upper())).strip()


def _accepts(text: str, words: List[str], variation: str) -> bool:
    if not variation:
        return False
    if text == variation:
        return True
    if text.replace(" ", "") == variation.replace(" ", ""):
        return True
    if variation in text:
        return True
    if len(variation) > 1 and variation in words:
        return True
    variation_words = variation.split(" ")
    if len(variation_words) > 1 and all(len(w) > 1 and w in text for w in variation_words):
        return True
    return False


def get_matching_variations(
        fragment: str,
        variations: Mapping[str, str],
        subjects: Mapping[str, Dict[str, str]],
) -> List[SubjectMatch]:
    """
    Find every dictionary variation accepted for a fragment.

    Variations pointing at unknown subject keys are ignored.

    Args:
        fragment: Raw or pre-normalized input text.
        variations: Variation text to subject key.
        subjects: Subject key to {'standard': label}.

    Returns:
        List[SubjectMatch]: Matches sorted by variation length, longest first.
    """
    text = normalize_text(fragment)
    if not text:
        return []
    words = text.split(" ")

    matches: List[SubjectMatch] = []
    for raw_variation, subject_key in variations.items():
        subject = subjects.get(subject_key)
        if not subject:
            continue
        variation = normalize_text(raw_variation)
        if _accepts(text, words, variation):
            matches.append(SubjectMatch(variation, subject_key, subject.get("standard", subject_key)))

    matches.sort(key=lambda m: len(m.variation), reverse=True)
    logger.debug(f"Matcher: {len(matches)} variation(s) for '{text}'")
    return matches


def get_partial_variations(
        fragment: str,
        variations: Mapping[str, str],
        subjects: Mapping[str, Dict[str, str]],
        min_word_length: int = 3,
) -> List[SubjectMatch]:
    """
    Find variations sharing at least one significant word with a fragment.

    Weaker than get_matching_variations: a multi-word variation qualifies on
    a single shared word. Used to offer suggestions when nothing matched.

    Returns:
        List[SubjectMatch]: Sorted by shared word count, then variation length.
    """
    words = {w for w in normalize_text(fragment).split(" ") if len(w) >= min_word_length}
    if not words:
        return []

    scored = []
    for raw_variation, subject_key in variations.items():
        subject = subjects.get(subject_key)
        if not subject:
            continue
        variation = normalize_text(raw_variation)
        shared = words.intersection(variation.split(" "))
        if shared:
            match = SubjectMatch(variation, subject_key, subject.get("standard", subject_key))
            scored.append((len(shared), len(variation), match))

    scored.sort(key=lambda s: (s[0], s[1]), reverse=True)
    return [m for _, _, m in scored]
