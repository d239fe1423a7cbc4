"""version_diff.py
Best-effort section-level diffing between two versions of a document.
"""

from typing import Dict, List

from src.models import DocumentChange, DocumentSection, ProcessedDocument


def _sections_by_title(document: ProcessedDocument) -> Dict[str, DocumentSection]:
    # Later duplicates of a title shadow earlier ones
    return {section.title: section for section in document.structure.sections}


def diff_sections(old: ProcessedDocument, new: ProcessedDocument) -> List[DocumentChange]:
    """
    Compare the sections of two versions of a document, matching them by title.

    Returns one ``DocumentChange`` per removed, modified or added section:
    removed and modified sections first (in old-document order), then added
    ones (in new-document order). Changes outside of any section are not
    reported.
    """
    old_sections = _sections_by_title(old)
    new_sections = _sections_by_title(new)
    changes: List[DocumentChange] = []

    for title, old_section in old_sections.items():
        new_section = new_sections.get(title)
        if new_section is None:
            changes.append(DocumentChange(
                type="removed",
                section=title,
                position=old_section.start_position,
                old_content=old_section.content,
            ))
        elif new_section.content != old_section.content:
            changes.append(DocumentChange(
                type="modified",
                section=title,
                position=new_section.start_position,
                old_content=old_section.content,
                new_content=new_section.content,
            ))

    for title, new_section in new_sections.items():
        if title not in old_sections:
            changes.append(DocumentChange(
                type="added",
                section=title,
                position=new_section.start_position,
                new_content=new_section.content,
            ))

    return changes
