"""test_line_classifiers.py
Test the line classification heuristics used by StructureSegmenter.
"""

import pytest

from src.parse_classes.structure_segmenter.helpers.line_classifiers import (
    classify_section_type,
    heading_level,
    is_heading,
    match_list_item,
)


class TestIsHeading:
    """Unit tests for is_heading()."""

    @pytest.mark.parametrize(
        "line",
        [
            "EXPERIENCE",
            "WORK EXPERIENCE",
            "Education:",
            "Summary of qualifications",
            "skills and tools",
            "Contact me",
        ],
    )
    def test_headings(self, line):
        assert is_heading(line) is True

    @pytest.mark.parametrize(
        "line",
        [
            "Built data pipelines for analytics",
            "john.doe@example.com",
            "- Designed a water filtration system",
        ],
    )
    def test_non_headings(self, line):
        assert is_heading(line) is False

    def test_long_lines_are_never_headings(self):
        assert is_heading("SUMMARY " + "X" * 100) is False


class TestHeadingLevel:
    """Unit tests for heading_level()."""

    @pytest.mark.parametrize(
        "length, level",
        [(1, 1), (19, 1), (20, 2), (39, 2), (40, 3), (99, 3)],
    )
    def test_level_by_length(self, length, level):
        assert heading_level("A" * length) == level


class TestMatchListItem:
    """Unit tests for match_list_item()."""

    @pytest.mark.parametrize("marker", ["-", "*", "+", "•", "●", "◦", "▪"])
    def test_bullet_markers(self, marker):
        assert match_list_item(f"{marker} built things") == ("bullet", "built things")

    def test_numbered_item(self):
        assert match_list_item("12. shipped a release") == ("numbered", "shipped a release")

    @pytest.mark.parametrize("line", ["-no space", "1) wrong marker", "plain text", "v1.2 release"])
    def test_non_items(self, line):
        assert match_list_item(line) is None

    def test_year_with_dot_counts_as_numbered(self):
        assert match_list_item("2024. joined") == ("numbered", "joined")


class TestClassifySectionType:
    """Unit tests for classify_section_type()."""

    @pytest.mark.parametrize(
        "title, section_type",
        [
            ("CONTACT", "contact"),
            ("Email and Phone:", "contact"),
            ("Career Objective", "summary"),
            ("Professional Profile:", "summary"),
            ("WORK EXPERIENCE", "experience"),
            ("Employment History:", "experience"),
            ("EDUCATION", "education"),
            ("University Degree", "education"),
            ("Technical Skills:", "skills"),
            ("Core Competencies", "skills"),
            ("PROJECTS", "projects"),
            ("Portfolio:", "projects"),
            ("Hobbies:", "other"),
        ],
    )
    def test_keyword_classification(self, title, section_type):
        assert classify_section_type(title) == section_type

    def test_first_matching_type_wins(self):
        # "contact" is checked before "experience"
        assert classify_section_type("Work Contact Details") == "contact"
