"""line_classifiers.py
Regex-driven heuristics used by StructureSegmenter to classify single lines.
"""

import re
from typing import Optional, Tuple

from src.config import PROCESSOR_DEFAULTS
from src.models import ListType, SectionType

ALL_CAPS_PATTERN = re.compile(r"^[A-Z][A-Z\s]+$")
SECTION_PREFIX_PATTERN = re.compile(
    r"^(summary|experience|education|skills|projects|contact)",
    re.IGNORECASE
)

BULLET_ITEM_PATTERN = re.compile(r"^[-*+•●◦▪]\s+(?P<item>.*)$")
NUMBERED_ITEM_PATTERN = re.compile(r"^\d+\.\s+(?P<item>.*)$")

# Checked in order, first match wins
SECTION_TYPE_PATTERNS: Tuple[Tuple[SectionType, re.Pattern], ...] = (
    ("contact", re.compile(r"contact|phone|email|address", re.IGNORECASE)),
    ("summary", re.compile(r"summary|objective|profile", re.IGNORECASE)),
    ("experience", re.compile(r"experience|work|employment|career", re.IGNORECASE)),
    ("education", re.compile(r"education|degree|university|school", re.IGNORECASE)),
    ("skills", re.compile(r"skills|technical|competencies", re.IGNORECASE)),
    ("projects", re.compile(r"projects|portfolio", re.IGNORECASE)),
)


def is_heading(line: str) -> bool:
    """
    Return True if a stripped line looks like a section heading.

    A heading is shorter than ``HEADING_MAX_LENGTH`` and is fully uppercase,
    all caps with spaces, ends with a colon, or starts with a known section
    keyword.
    """
    return len(line) < PROCESSOR_DEFAULTS.HEADING_MAX_LENGTH and (
        line.isupper()
        or bool(ALL_CAPS_PATTERN.match(line))
        or line.endswith(":")
        or bool(SECTION_PREFIX_PATTERN.match(line))
    )


def heading_level(line: str) -> int:
    """Shorter headings rank higher: <20 chars is level 1, <40 level 2, else 3."""
    if len(line) < 20:
        return 1
    if len(line) < 40:
        return 2
    return 3


def match_list_item(line: str) -> Optional[Tuple[ListType, str]]:
    """
    Return ``(list_type, item_text)`` if the stripped line starts with a bullet
    or ``<digits>.`` marker, else None.
    """
    match = BULLET_ITEM_PATTERN.match(line)
    if match:
        return "bullet", match.group("item").strip()

    match = NUMBERED_ITEM_PATTERN.match(line)
    if match:
        return "numbered", match.group("item").strip()

    return None


def classify_section_type(title: str) -> SectionType:
    """Assign a section type by case-insensitive keyword matching on its title."""
    for section_type, pattern in SECTION_TYPE_PATTERNS:
        if pattern.search(title):
            return section_type
    return "other"
