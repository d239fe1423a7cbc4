"""word_document_parser.py

Holds WordDocumentParser class using docx2txt for text extraction.
"""
from io import BytesIO

import docx2txt

from src.models import ParsedText
from src.parse_classes.file_parser.file_parser import FileParser


class WordDocumentParser(FileParser):
    """
    Concrete parser for Microsoft Word documents (.docx).

    This class extends the abstract ``FileParser`` and uses ``docx2txt`` to
    extract textual content (including from textboxes) from an in-memory copy
    of the file. DOCX carries no reliable page breaks, so the text becomes a
    single synthesized page. Bytes that are not a readable DOCX archive are
    handed to best-effort text recovery.

    Attributes:
        SUPPORTED_FORMATS (List[str]): Declared types supported by this parser.
    """

    SUPPORTED_FORMATS = [
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    ]

    def parse(self) -> ParsedText:
        """
        Parses the Word document and returns a ``ParsedText``.
        """
        try:
            full_text = self._get_docx_contents()
        except Exception as e:
            return self._recover_parsed_text(str(e))

        return self._build_parsed_text([full_text])

    def _get_docx_contents(self) -> str:
        """
        Reads the Word document using docx2txt and extracts all text content
        (including textboxes). Paragraph breaks come out as blank lines, which
        are collapsed to single newlines.

        Returns:
            str: The extracted text of the document.
        """
        full_text = docx2txt.process(BytesIO(self.raw_file.content))
        lines = [line.rstrip() for line in full_text.splitlines()]
        return "\n".join(line for line in lines if line.strip())
