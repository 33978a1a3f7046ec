from __future__ import annotations

"""
Subject Fragment Extraction.

Derives the text the subject matcher works on from a PDF file name: the full
normalized stem, and a residual fragment with every known noise token
(years, semester markers, degree and branch labels, exam words, months,
file-type words) stripped out.
"""

import os
import re

from pyqcrawler.domain.constants import SUBJECT_NOISE_PATTERNS

_SEPARATORS_RX = re.compile(r"[_\-.]")
_WHITESPACE_RX = re.compile(r"\s+")
_NOISE_RX = [re.compile(p, re.IGNORECASE) for p in SUBJECT_NOISE_PATTERNS]


def file_stem(file_name: str) -> str:
    """Return the base name without its extension."""
    return os.path.splitext(os.path.basename(file_name.replace("\\", "/")))[0]


def full_name_part(file_name: str) -> str:
    """
    Normalize the whole file stem for matching.

    Example: 'FE-BTECH_PHYSICS_SEM I_DEC 2016.pdf' -> 'FE BTECH PHYSICS SEM I DEC 2016'.
    """
    return _WHITESPACE_RX.sub(" ", _SEPARATORS_RX.sub(" ", file_stem(file_name))).strip().upper()


def extract_subject_part(file_name: str) -> str:
    """
    Strip noise tokens from a file name until a fixed point is reached.

    Removing one token can expose another (e.g. 'SEM' left over once 'SEM I'
    is gone), so the pattern pass repeats while the text keeps changing.

    Args:
        file_name: Listed PDF file name.

    Returns:
        str: Upper-cased residual fragment, possibly empty.
    """
    name = _SEPARATORS_RX.sub(" ", file_stem(file_name))

    previous = None
    while previous != name:
        previous = name
        for rx in _NOISE_RX:
            name = rx.sub(" ", name)
        name = _WHITESPACE_RX.sub(" ", name).strip()

    return name.upper()
