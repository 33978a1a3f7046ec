from __future__ import annotations

"""
Domain Constants and Pattern Tables.

Centralizes the remote source coordinates, the standard facet vocabularies and
the ordered lookup tables consumed by the metadata extractors and the subject
noise stripper. Table order is significant: the first matching key wins.
"""

from typing import Dict, List, Tuple

CURRENT_CONFIG_VERSION = "1.0.0"

UNKNOWN = "Unknown"

# -----------------------------------------------------------------------------
# REMOTE SOURCE
# -----------------------------------------------------------------------------

DEFAULT_BASE_URL = (
    "http://43.227.20.36:82/DigitalLibrary/"
    "Old%20Question%20Papers/B%20Tech%20(Autonomy)/"
)
DEFAULT_BASE_PATH = "/DigitalLibrary/Old Question Papers/B Tech (Autonomy)/"
DEFAULT_TEST_DIR = "/2%200%201%206/"

DEFAULT_MIN_YEAR = 2000
DEFAULT_MAX_YEAR = 2025

# -----------------------------------------------------------------------------
# FACETS
# -----------------------------------------------------------------------------

# (meta key, Paper attribute) in persisted order
FACET_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("years", "year"),
    ("branches", "branch"),
    ("examTypes", "exam_type"),
    ("semesters", "semester"),
    ("subjects", "subject"),
    ("standardSubjects", "standard_subject"),
)

STANDARD_BRANCHES: Dict[str, str] = {
    "COMP": "COMP",
    "IT": "IT",
    "ENTC": "ENTC",
    "MECH": "MECH",
    "CIVIL": "CIVIL",
    "CHEM": "CHEM",
    "ELEC": "ELEC",
    "INSTRU": "INSTRU",
    "COMMON": "COMMON",
    "MTECH": "MTECH",
}

STANDARD_SEMESTERS: Dict[str, str] = {
    f"SEM{n}": f"Semester {n}" for n in range(1, 9)
}

STANDARD_EXAM_TYPES: Dict[str, str] = {
    "ESE": "ESE",
    "MSE": "MSE",
    "INSEM": "INSEM",
    "CAT": "CAT",
    "UT": "UT",
}

# -----------------------------------------------------------------------------
# YEAR TABLES
# -----------------------------------------------------------------------------

# Academic-year labels ("16-17", "2016-17") resolve to the session start year
ACADEMIC_YEAR_MAPPINGS: Dict[str, str] = {}
for _y in range(DEFAULT_MIN_YEAR, DEFAULT_MAX_YEAR + 1):
    _short, _next = _y % 100, (_y + 1) % 100
    ACADEMIC_YEAR_MAPPINGS[f"{_y}-{_next:02d}"] = str(_y)
    ACADEMIC_YEAR_MAPPINGS[f"{_y}-{_y + 1}"] = str(_y)
    ACADEMIC_YEAR_MAPPINGS[f"{_short:02d}-{_next:02d}"] = str(_y)
del _y, _short, _next

MONTH_TOKENS: List[str] = [
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
]

# -----------------------------------------------------------------------------
# BRANCH TABLES
# -----------------------------------------------------------------------------

BRANCH_MAPPINGS: Dict[str, str] = {
    "COMPUTER": "COMP",
    "COMP": "COMP",
    "CSE": "COMP",
    "CS": "COMP",
    "INFORMATION TECHNOLOGY": "IT",
    "IT": "IT",
    "E&TC": "ENTC",
    "ENTC": "ENTC",
    "EXTC": "ENTC",
    "ETC": "ENTC",
    "ELECTRONICS": "ENTC",
    "MECHANICAL": "MECH",
    "MECH": "MECH",
    "CIVIL": "CIVIL",
    "CHEMICAL": "CHEM",
    "CHEM": "CHEM",
    "ELECTRICAL": "ELEC",
    "ELEC": "ELEC",
    "INSTRUMENTATION": "INSTRU",
    "INSTRU": "INSTRU",
    "M.TECH": "MTECH",
    "M TECH": "MTECH",
    "MTECH": "MTECH",
    "B.TECH": "COMMON",
    "B TECH": "COMMON",
    "BTECH": "COMMON",
    "COMMON": "COMMON",
}

# Keys skipped by the re-exam search, they name the degree rather than a branch
GENERIC_BRANCH_KEYS = frozenset(
    key for key, value in BRANCH_MAPPINGS.items() if value in ("COMMON", "MTECH")
)

POSTGRADUATE_TOKENS: List[str] = ["M.TECH", "MTECH", "M TECH"]
UNDERGRADUATE_TOKENS: List[str] = ["B.TECH", "BTECH", "B TECH"]
RE_EXAM_TOKENS: List[str] = ["RE EXAM", "RE-EXAM", "REEXAM"]

FIRST_YEAR_PATTERNS: List[str] = [
    r"(?<![A-Z0-9])F\.?\s?E\.?(?![A-Z0-9])",
    r"(?<![A-Z0-9])F\.?\s?Y\.?(?![A-Z0-9])",
    r"FIRST[\s_-]*YEAR",
    r"(?<![A-Z0-9])1ST[\s_-]*YEAR",
]

# -----------------------------------------------------------------------------
# SEMESTER TABLES
# -----------------------------------------------------------------------------

SEMESTER_MAPPINGS: Dict[str, str] = {
    "I": "Semester 1", "1": "Semester 1",
    "II": "Semester 2", "2": "Semester 2",
    "III": "Semester 3", "3": "Semester 3",
    "IV": "Semester 4", "4": "Semester 4",
    "V": "Semester 5", "5": "Semester 5",
    "VI": "Semester 6", "6": "Semester 6",
    "VII": "Semester 7", "7": "Semester 7",
    "VIII": "Semester 8", "8": "Semester 8",
}

_ORDINALS = ["FIRST", "SECOND", "THIRD", "FOURTH", "FIFTH", "SIXTH", "SEVENTH", "EIGHTH"]
_SUFFIXES = ["1ST", "2ND", "3RD", "4TH", "5TH", "6TH", "7TH", "8TH"]

SEMESTER_LABELS: Dict[str, str] = {}
for _i, (_word, _num) in enumerate(zip(_ORDINALS, _SUFFIXES), start=1):
    SEMESTER_LABELS[f"{_word} SEMESTER"] = f"Semester {_i}"
    SEMESTER_LABELS[f"{_word} SEM"] = f"Semester {_i}"
    SEMESTER_LABELS[f"{_num} SEMESTER"] = f"Semester {_i}"
    SEMESTER_LABELS[f"{_num} SEM"] = f"Semester {_i}"
del _i, _word, _num

# -----------------------------------------------------------------------------
# EXAM TYPE TABLES
# -----------------------------------------------------------------------------

EXAM_MAPPINGS: Dict[str, str] = {
    "END SEMESTER": "ESE",
    "END SEM": "ESE",
    "ENDSEM": "ESE",
    "ESE": "ESE",
    "MID SEMESTER": "MSE",
    "MID SEM": "MSE",
    "MIDSEM": "MSE",
    "MSE": "MSE",
    "IN SEM": "INSEM",
    "INSEM": "INSEM",
    "CAT1": "CAT",
    "CAT2": "CAT",
    "CAT": "CAT",
    "UT1": "UT",
    "UT2": "UT",
    "UT": "UT",
    "MAY": "ESE",
    "JUNE": "ESE",
    "NOV": "ESE",
    "DEC": "ESE",
}

# Last-resort filename signals, checked after the table scan
EXAM_FALLBACK_SIGNALS: List[Tuple[str, str]] = [
    ("END COURSE", "ESE"),
    ("UNIT TEST", "UT"),
    ("CYCLE", "CAT"),
]

# -----------------------------------------------------------------------------
# SUBJECT NOISE TOKENS
# -----------------------------------------------------------------------------

# Applied case-insensitively, after '_', '-' and '.' have become spaces, and
# repeated until the text stops changing
SUBJECT_NOISE_PATTERNS: List[str] = [
    r"\b(?:19|20)\d{2}\b",
    r"\bsem(?:ester)?\s*(?:[ivx]+|\d+)\b",
    r"\bs\s*\d\b",
    r"\bsem(?:ester)?\b",
    r"\b(?:fe|sy|ty)\s*b\s*tech\b",
    r"\b[fst]\s+[ey]\b",
    r"\b(?:fe|sy|ty|fy)\b",
    r"\b[bm]\s*tech\b",
    r"\b(?:cse|it|civil|mech|entc|comp|computer|mechanical|electrical|electronics"
    r"|instrumentation|information|technology)\b",
    r"\b(?:insem|endsem|midsem|quiz|assignment|cat1|cat2|fat|prelim"
    r"|final|exam|paper|question|winter|summer)\b",
    r"\bre\s*exam\b",
    r"\bcycle\s*\d+\b",
    r"\b(?:january|february|march|april|may|june|july|august|september|october"
    r"|november|december)\b",
    r"\b(?:jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec)\b",
    r"\b(?:syllabus|notes|ppt|pdf|docx|doc|sol|solution|answer|key)\b",
    r"\b(?:engineering|part[12]|unit\d+|chapter\d+)\b",
    r"\b(?:as|hp)\b",
]
