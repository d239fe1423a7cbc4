"""structure_segmenter.py
Classifies extracted text into sections, headings, paragraphs and lists.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from src.config import PROCESSOR_DEFAULTS
from src.exceptions import SegmentationError
from src.models import (
    DocumentHeading,
    DocumentList,
    DocumentParagraph,
    DocumentSection,
    DocumentStructure,
    ListType,
    SectionType,
)

from src.parse_classes.structure_segmenter.helpers.line_classifiers import (
    classify_section_type,
    heading_level,
    is_heading,
    match_list_item,
)


@dataclass
class _OpenSection:
    """Section still receiving lines; frozen into a DocumentSection once closed."""
    id: str
    title: str
    type: SectionType
    start_position: int
    end_position: int
    lines: List[str] = field(default_factory=list)

    def close(self, confidence: float) -> DocumentSection:
        return DocumentSection(
            id=self.id,
            title=self.title,
            type=self.type,
            content="".join(line + "\n" for line in self.lines),
            start_position=self.start_position,
            end_position=self.end_position,
            confidence=confidence,
        )


@dataclass
class _OpenList:
    id: str
    type: ListType
    position: int
    section: Optional[str]
    items: List[str] = field(default_factory=list)

    def close(self) -> DocumentList:
        return DocumentList(
            id=self.id,
            type=self.type,
            position=self.position,
            items=self.items,
            section=self.section,
        )


class StructureSegmenter:
    """
    Heuristic, line-based structural segmenter.

    Lines are walked in order while tracking their character offset in the
    original text. Each non-empty line is classified as:
        * a heading, which closes the open section and opens a new one,
        * otherwise a list item (bullet or ``<digits>.`` marker),
        * otherwise a paragraph.

    Paragraphs and list items are attributed to the open section and extend
    its content and end offset. Lines before the first heading belong to no
    section. Section classification is approximate; every section reports the
    same fixed ``confidence``.

    Segmentation is pure and keeps no state between calls, so one instance can
    be shared across threads.

    Example
    -------
    >>> structure = StructureSegmenter().segment("EXPERIENCE:\\nDid X\\nEDUCATION:\\nSchool Z")
    >>> [section.type for section in structure.sections]
    ['experience', 'education']
    """

    def __init__(self, confidence: float = PROCESSOR_DEFAULTS.SECTION_CONFIDENCE):
        self.confidence = confidence

    def segment(self, text: str, filename: Optional[str] = None) -> DocumentStructure:
        """
        Segment ``text`` into a ``DocumentStructure``.

        Args:
            text (str): Extracted text of a document.
            filename (str | None): Only used to identify the document in errors.

        Returns:
            DocumentStructure: Ordered sections, headings, paragraphs and lists.

        Raises:
            SegmentationError: If ``text`` is not a string.
        """
        if not isinstance(text, str):
            raise SegmentationError(
                identifier=filename,
                message=f"Expected extracted text as str, got {type(text).__name__}"
            )

        headings: List[DocumentHeading] = []
        paragraphs: List[DocumentParagraph] = []
        lists: List[DocumentList] = []
        sections: List[DocumentSection] = []
        open_section: Optional[_OpenSection] = None
        open_list: Optional[_OpenList] = None

        offset = 0
        for index, raw_line in enumerate(text.split("\n")):
            line_start = offset
            offset += len(raw_line) + 1

            line = raw_line.strip()
            if not line:
                continue
            position = line_start + (len(raw_line) - len(raw_line.lstrip()))

            if is_heading(line):
                if open_list is not None:
                    lists.append(open_list.close())
                    open_list = None
                headings.append(
                    DocumentHeading(
                        id=f"heading-{index}",
                        text=line,
                        level=heading_level(line),
                        position=position,
                    )
                )

                if open_section is not None:
                    open_section.end_position = position - 1
                    sections.append(open_section.close(self.confidence))

                open_section = _OpenSection(
                    id=f"section-{len(sections)}",
                    title=line,
                    type=classify_section_type(line),
                    start_position=position,
                    end_position=position + len(line),
                )
                continue

            section_id = open_section.id if open_section else None
            list_item = match_list_item(line)

            if list_item is not None:
                list_type, item = list_item
                if open_list is None or open_list.type != list_type:
                    if open_list is not None:
                        lists.append(open_list.close())
                    open_list = _OpenList(
                        id=f"list-{index}",
                        type=list_type,
                        position=position,
                        section=section_id,
                    )
                open_list.items.append(item)
            else:
                if open_list is not None:
                    lists.append(open_list.close())
                    open_list = None
                paragraphs.append(
                    DocumentParagraph(
                        id=f"paragraph-{index}",
                        text=line,
                        position=position,
                        section=section_id,
                    )
                )

            if open_section is not None:
                open_section.lines.append(line)
                open_section.end_position = position + len(line)

        # Close whatever is still open at end of document
        if open_list is not None:
            lists.append(open_list.close())
        if open_section is not None:
            sections.append(open_section.close(self.confidence))

        return DocumentStructure(
            sections=sections,
            headings=headings,
            paragraphs=paragraphs,
            lists=lists,
        )
