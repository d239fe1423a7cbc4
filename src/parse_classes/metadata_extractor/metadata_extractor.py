"""metadata_extractor.py
Derives DocumentMetadata from a raw file and its extracted text.
"""

from src.models import DocumentMetadata, RawFile


def count_words(text: str) -> int:
    """Number of non-empty whitespace-separated tokens in ``text``."""
    return len(text.split())


def extract_metadata(raw_file: RawFile, text: str, page_count: int) -> DocumentMetadata:
    """
    Build the ``DocumentMetadata`` of a processed file.

    Counts are derived from the extracted text; file-level attributes (size,
    declared type, last-modified time) are passed through unmodified.

    Args:
        raw_file (RawFile): The file as uploaded.
        text (str): Extracted text of the file.
        page_count (int): Number of pages produced by the parser.

    Returns:
        DocumentMetadata: Counts and file attributes.
    """
    return DocumentMetadata(
        filename=raw_file.filename,
        size=raw_file.size,
        type=raw_file.declared_type,
        last_modified=raw_file.last_modified,
        page_count=page_count,
        word_count=count_words(text),
        character_count=len(text),
        created_date=raw_file.last_modified,
        modified_date=raw_file.last_modified,
    )
