"""documents.py
Helpers building ProcessedDocuments and deterministic clocks for storage tests.
"""
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

from src.models import ProcessedDocument, RawFile
from src.parse_classes.file_parser.helpers.check_file_format import PLAIN_TEXT_TYPE
from src.parse_classes.file_parser.helpers.text_blocks import build_pages
from src.parse_classes.metadata_extractor.metadata_extractor import extract_metadata
from src.parse_classes.structure_segmenter.structure_segmenter import StructureSegmenter

_document_ids = count(1)


def make_processed_document(
    text: str = "SUMMARY\nExperienced Python developer",
    filename: str = "resume.txt",
    declared_type: str = PLAIN_TEXT_TYPE,
    size: Optional[int] = None,
    document_id: Optional[str] = None,
) -> ProcessedDocument:
    """
    Build a ``ProcessedDocument`` for ``text`` without going through a parser,
    so any filename, declared type and size can be combined freely.
    """
    raw_file = RawFile(
        content=text.encode("utf-8"),
        filename=filename,
        declared_type=declared_type,
        size=size,
    )
    pages = build_pages([text])
    return ProcessedDocument(
        id=document_id or f"doc-test-{next(_document_ids)}",
        filename=filename,
        extracted_text=text,
        pages=pages,
        metadata=extract_metadata(raw_file, text, page_count=len(pages)),
        structure=StructureSegmenter().segment(text, filename=filename),
    )


class TickingClock:
    """
    Deterministic clock for DocumentStorage: every call returns a time one
    second later than the previous call.
    """

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.current = self.current + self.step
        return self.current
