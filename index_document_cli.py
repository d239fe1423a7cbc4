"""index_document_cli.py
Run DocumentProcessingFramework from the command line.
Example: `python index_document_cli.py path/to/resume.pdf path/to/cv.docx --search "python sql"`
"""
import sys
from typing import List, Optional, Tuple

from src.exceptions import DocumentPipelineError
from src.models import RawFile, SearchQuery, StoredDocument
from src.parse_classes.document_processing_framework import DocumentProcessingFramework
from src.storage.document_storage import DocumentStorage

USAGE = "Usage: python index_document_cli.py <file_path> [<file_path> ...] [--search <terms>]"


def parse_args(argv: List[str]) -> Tuple[List[str], Optional[str]]:
    """Split the arguments into file paths and an optional content search."""
    file_paths = []
    search_terms = None

    args = iter(argv)
    for arg in args:
        if arg == "--search":
            search_terms = next(args, None)
            if not search_terms:
                raise ValueError("--search needs a value")
        else:
            file_paths.append(arg)

    return file_paths, search_terms


def print_summary(stored: StoredDocument):
    document = stored.document
    metadata = document.metadata
    print(f"\n{document.filename} (id: {stored.id})")
    print(
        f"  Type: {metadata.type} | Pages: {metadata.page_count} | "
        f"Words: {metadata.word_count} | Characters: {metadata.character_count}"
    )

    if not document.structure.sections:
        print("  Sections: None")
    for section in document.structure.sections:
        print(
            f"  [{section.type}] {section.title} "
            f"({section.start_position}-{section.end_position}, confidence {section.confidence})"
        )

    list_count = len(document.structure.lists)
    paragraph_count = len(document.structure.paragraphs)
    print(f"  Paragraphs: {paragraph_count} | Lists: {list_count}")


def main():
    try:
        file_paths, search_terms = parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"{e}\n{USAGE}")
        sys.exit(1)

    if not file_paths:
        print(USAGE)
        sys.exit(1)

    # Initialize the pipeline and an in-memory storage for this run
    framework = DocumentProcessingFramework()
    storage = DocumentStorage()

    failures = 0
    for file_path in file_paths:
        try:
            document_id = framework.ingest(RawFile.from_path(file_path), storage)
        except (DocumentPipelineError, FileNotFoundError) as e:
            failures += 1
            print(f"\nFailed to index {file_path}: {e}")
            continue
        print_summary(storage.get_document(document_id))

    if search_terms:
        result = storage.search(SearchQuery(content_search=search_terms, sort_by="name"))
        print(f"\nSearch '{search_terms}': {result.total_count} match(es) in {result.search_time_ms:.2f}ms")
        for stored in result.documents:
            print(f"  - {stored.document.filename} (id: {stored.id})")

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
