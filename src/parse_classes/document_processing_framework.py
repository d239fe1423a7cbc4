"""document_processing_framework.py
Holds framework to orchestrate operation of FileParser(), StructureSegmenter()
and extract_metadata() and return a ProcessedDocument.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, List, Optional, Type

from src.config import PROCESSOR_DEFAULTS
from src.exceptions import DocumentPipelineError, SegmentationError
from src.logging import LoggerFactory
from src.models import ProcessedDocument, RawFile, ParsedText, DocumentStructure

from src.parse_classes.file_parser.file_parser import FileParser
from src.parse_classes.file_parser.text_parser import PlainTextParser
from src.parse_classes.file_parser.pdf_parser import PDFParser
from src.parse_classes.file_parser.word_document_parser import WordDocumentParser
from src.parse_classes.file_parser.helpers.check_file_format import check_file_format
from src.parse_classes.file_parser.helpers.text_blocks import build_pages
from src.parse_classes.metadata_extractor.metadata_extractor import count_words, extract_metadata
from src.parse_classes.structure_segmenter.structure_segmenter import StructureSegmenter

logger_factory = LoggerFactory()
logger = logger_factory.get_logger(name="document_processing", logger_type="pipeline")


def generate_document_id() -> str:
    return f"doc-{uuid.uuid4().hex[:12]}"


class DocumentProcessingFramework:
    """
    Orchestrates the complete intake process, from raw file to ProcessedDocument.

    Combines:
        - ``FileParser`` (e.g., :class:`PDFParser`, :class:`WordDocumentParser`)
        - :class:`StructureSegmenter`
        - :func:`extract_metadata`

    Any failure aborts the intake of that file: no partially built
    ``ProcessedDocument`` is ever returned or stored. Raised errors carry the
    pipeline stage and the filename.

    This class supports dependency overrides to simplify testing. During tests,
    you can inject:
        * ``segmenter``: to replace the structural segmenter.
        * ``id_factory``: to produce predictable document ids.

    Parameters
    ----------
    max_file_size_mb : float, optional
        The maximum file size (in megabytes) allowed for parsing.
        Defaults to ``PROCESSOR_DEFAULTS.MAX_FILE_SIZE_MB``.
    max_threads : int, optional
        Maximum number of files processed in parallel by ``process_documents``.
    segmenter : StructureSegmenter, optional
        Segmenter instance to use. A default one is created if omitted.
    id_factory : callable, optional
        Zero-argument callable returning a new document id.

    Example
    -------
    >>> framework = DocumentProcessingFramework()
    >>> document = framework.process_document(RawFile.from_path("path/to/resume.pdf"))
    """

    FORMAT_PARSER_MAP: Dict[str, Type[FileParser]] = {
        "text/plain": PlainTextParser,
        "text/markdown": PlainTextParser,
        "application/pdf": PDFParser,
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": WordDocumentParser,
    }

    def __init__(
        self,
        max_file_size_mb: Optional[float] = PROCESSOR_DEFAULTS.MAX_FILE_SIZE_MB,
        max_threads: int = PROCESSOR_DEFAULTS.MAX_THREADS,
        segmenter: Optional[StructureSegmenter] = None,
        id_factory=generate_document_id,
    ):
        self.max_file_size_mb = max_file_size_mb
        self.max_threads = max(1, max_threads)
        self.segmenter = segmenter or StructureSegmenter()
        self.id_factory = id_factory

    def process_document(self, raw_file: RawFile) -> ProcessedDocument:
        """
        Full pipeline: parse file → segment text → extract metadata → return
        ``ProcessedDocument``.

        Args:
            raw_file (RawFile): The uploaded file.

        Returns:
            ProcessedDocument: The typed record for the file.

        Raises:
            UnsupportedFormatError, FileTooLargeError, FileReadError: Parse stage.
            SegmentationError: Segment stage.
        """
        logger.info(
            f"Starting document processing: filename='{raw_file.filename}' "
            f"size={raw_file.size} type='{raw_file.declared_type}'"
        )

        try:
            parsed_text = self._parse_file(raw_file)
            structure = self._segment_text(parsed_text, raw_file.filename)
        except DocumentPipelineError as e:
            logger.error(f"Document processing failed: filename='{raw_file.filename}' {e}")
            logger_factory.get_stage_failure_logger(e.stage).warning(str(e))
            raise

        metadata = extract_metadata(
            raw_file=raw_file,
            text=parsed_text.text,
            page_count=len(parsed_text.pages),
        )

        document = ProcessedDocument(
            id=self.id_factory(),
            filename=raw_file.filename,
            extracted_text=parsed_text.text,
            pages=parsed_text.pages,
            metadata=metadata,
            structure=structure,
        )

        logger.info(
            f"Document processing complete: id='{document.id}' pages={metadata.page_count} "
            f"words={metadata.word_count} sections={len(structure.sections)}"
        )
        return document

    def process_documents(self, raw_files: List[RawFile]) -> List[ProcessedDocument]:
        """
        Process many files, in parallel when ``max_threads`` > 1.

        Intake shares no state between files, so no coordination is needed.
        Results keep the order of ``raw_files``. The first failure is raised
        once every submitted file has finished.
        """
        if self.max_threads == 1 or len(raw_files) <= 1:
            return [self.process_document(raw_file) for raw_file in raw_files]

        with ThreadPoolExecutor(max_workers=min(self.max_threads, len(raw_files))) as executor:
            futures = [executor.submit(self.process_document, raw_file) for raw_file in raw_files]
        return [future.result() for future in futures]

    def ingest(self, raw_file: RawFile, storage, tags: Optional[List[str]] = None) -> str:
        """
        Process ``raw_file`` and store the result in ``storage``.

        Nothing is stored when processing fails.

        Args:
            raw_file (RawFile): The uploaded file.
            storage (DocumentStorage): Storage engine receiving the document.
            tags (list[str] | None): Initial tags of the stored document.

        Returns:
            str: Id of the stored document.
        """
        document = self.process_document(raw_file)
        return storage.store(document, tags=tags)

    def reprocess_text(
        self,
        document: ProcessedDocument,
        text: str,
        filename: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the field updates that replace the extracted text of an already
        processed document: a single page rebuilt from ``text``, a fresh
        structure and refreshed counts. File-level metadata (size, declared
        type, dates) is kept.

        Pass the result to ``DocumentStorage.update``, ideally from inside an
        update callable so it is derived from the current stored document.

        Raises:
            SegmentationError: If ``text`` cannot be segmented.
        """
        identifier = filename or document.filename
        structure = self._segment_text(ParsedText(text=text), identifier)
        pages = build_pages([text])
        return {
            "extracted_text": text,
            "pages": pages,
            "structure": structure,
            "metadata": replace(
                document.metadata,
                page_count=len(pages),
                word_count=count_words(text),
                character_count=len(text),
            ),
        }

    def _parse_file(self, raw_file: RawFile) -> ParsedText:
        """
        Internal helper that selects and executes the appropriate ``FileParser``
        subclass for the declared type of ``raw_file``.

        Raises:
            UnsupportedFormatError: If the declared type is not in
                ``self.FORMAT_PARSER_MAP``.
        """
        declared_type = check_file_format(
            declared_type=raw_file.declared_type,
            supported_formats=self.FORMAT_PARSER_MAP.keys(),
            filename=raw_file.filename,
        )
        parser_class = self.FORMAT_PARSER_MAP[declared_type]

        parser = parser_class(
            raw_file=raw_file,
            max_file_size_mb=self.max_file_size_mb,
        )
        return parser.parse()

    def _segment_text(self, parsed_text: ParsedText, filename: str) -> DocumentStructure:
        """Run the segmenter, reporting any failure as a segment-stage error."""
        try:
            return self.segmenter.segment(parsed_text.text, filename=filename)
        except SegmentationError:
            raise
        except Exception as e:
            raise SegmentationError(identifier=filename, message=str(e)) from e
