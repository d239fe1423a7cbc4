"""text_parser.py

Holds PlainTextParser class.
"""
from src.exceptions import FileReadError
from src.models import ParsedText

from src.parse_classes.file_parser.file_parser import FileParser


class PlainTextParser(FileParser):
    """
    Concrete parser for plain-text documents (.txt, .md).

    The raw bytes are decoded directly as UTF-8 (a leading byte order mark is
    dropped). Plain text has no real pages, so the whole text becomes a single
    synthesized page.

    Attributes:
        SUPPORTED_FORMATS (List[str]): Declared types supported by this parser.
    """
    SUPPORTED_FORMATS = ["text/plain", "text/markdown"]

    def parse(self) -> ParsedText:
        """
        Decodes the text document and returns a ``ParsedText``.

        Raises:
            FileReadError: If the bytes are not valid UTF-8.
        """
        full_text = self._get_text_contents()
        return self._build_parsed_text([full_text])

    def _get_text_contents(self) -> str:
        try:
            text = self.raw_file.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileReadError(self.filename, str(e))

        # Normalize Windows and old Mac line endings
        return text.replace("\r\n", "\n").replace("\r", "\n")
