"""file_parser.py

Holds abstract FileParser class inherited by format-specific parsers.
"""

from typing import List
from abc import ABC, abstractmethod

from src.config import PROCESSOR_DEFAULTS
from src.logging import LoggerFactory
from src.models import RawFile, ParsedText
from src.exceptions import FileTooLargeError

from src.parse_classes.file_parser.helpers.text_blocks import build_pages, join_page_text
from src.parse_classes.file_parser.helpers.recover_text import recover_text
from src.parse_classes.file_parser.helpers.check_file_format import check_file_format

logger = LoggerFactory().get_logger(name="file_parser", logger_type="pipeline")


class FileParser(ABC):
    """
    Abstract base class representing a generic file parser.

    All concrete parsers must implement the `parse` method.

    Args:
        raw_file (RawFile): Raw bytes, filename and declared type of the file.
        max_file_size_mb (float | None, optional): Maximum allowed file size in megabytes.
            If None, no size limit is enforced.

    Attributes:
        raw_file (RawFile): The file to parse.
        max_file_size_mb (float | None): Maximum allowed file size.
        declared_type (str): Normalized declared type of the file.
    """
    # Formats supported by a specific concrete class (to be overwritten by children)
    SUPPORTED_FORMATS: List[str] = []

    def __init__(
        self,
        raw_file: RawFile,
        max_file_size_mb: float | None = PROCESSOR_DEFAULTS.MAX_FILE_SIZE_MB
    ):
        self.raw_file = raw_file
        self.max_file_size_mb = max_file_size_mb
        self.declared_type = check_file_format(
            declared_type=raw_file.declared_type,
            supported_formats=self.SUPPORTED_FORMATS,
            filename=raw_file.filename,
        )
        self._validate_file()

    @property
    def filename(self) -> str:
        return self.raw_file.filename

    def _validate_file(self):
        """Validate whether the file can be parsed by this parser.

        Raises:
            FileTooLargeError: Raised if the file exceeds the max_file_size_mb
        """
        if self.max_file_size_mb is not None:
            # Convert MB to bytes (1 MB = 1024 * 1024 bytes)
            max_size_bytes = int(self.max_file_size_mb * 1024 * 1024)
            actual_size_bytes = len(self.raw_file.content)

            if actual_size_bytes > max_size_bytes:
                raise FileTooLargeError(
                    max_size=max_size_bytes,
                    actual_size=actual_size_bytes,
                    filename=self.filename,
                )

    def _build_parsed_text(self, page_texts: List[str]) -> ParsedText:
        """
        Assemble the final `ParsedText` from the text of each page.

        The full text is the page texts joined by newlines, so offsets in the
        full text line up with the page order.
        """
        pages = build_pages(page_texts)
        full_text = join_page_text(pages)
        return ParsedText(text=full_text, pages=pages)

    def _recover_parsed_text(self, reason: str) -> ParsedText:
        """
        Fall back to best-effort text recovery when the structural parser for
        this format failed. Never raises.
        """
        logger.warning(
            f"Structural parsing of '{self.filename}' ({self.declared_type}) failed, "
            f"falling back to best-effort text recovery: {reason}"
        )
        return self._build_parsed_text([recover_text(self.raw_file.content)])

    @abstractmethod
    def parse(self) -> ParsedText:
        """
        Parses ``self.raw_file`` and returns its text and page breakdown.

        Returns:
            ParsedText: Holds:
                - text: str
                - pages: Tuple[DocumentPage, ...]
        """
        pass
