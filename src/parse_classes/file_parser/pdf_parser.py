"""pdf_parser.py

Holds PDFParser class.
"""
from typing import List

import pymupdf

from src.models import ParsedText

from src.parse_classes.file_parser.file_parser import FileParser


class PDFParser(FileParser):
    """
    Concrete parser for PDF documents (.pdf).

    This class extends the abstract ``FileParser`` and uses PyMuPDF to extract
    textual content from the raw PDF bytes, one ``DocumentPage`` per PDF page.
    Bytes PyMuPDF cannot open are handed to best-effort text recovery instead
    of failing the intake.

    Attributes:
        SUPPORTED_FORMATS (List[str]): Declared types supported by this parser
            (only ``application/pdf``).
    """
    SUPPORTED_FORMATS = ["application/pdf"]

    def parse(self) -> ParsedText:
        """
        Parses the PDF document and returns a ``ParsedText``.

        Returns:
            ParsedText: The text and per-page breakdown of the PDF, or a
            lower-fidelity recovery if the PDF could not be opened.
        """
        try:
            page_texts = self._get_pdf_page_texts()
        except Exception as e:
            return self._recover_parsed_text(str(e))

        return self._build_parsed_text(page_texts)

    def _get_pdf_page_texts(self) -> List[str]:
        """
        Opens the PDF bytes using PyMuPDF and returns the text of every page.

        Returns:
            List[str]: Text of each page, in page order.
        """
        page_texts = []
        with pymupdf.open(stream=self.raw_file.content, filetype="pdf") as doc:
            for page_number in range(doc.page_count):
                page = doc.load_page(page_number)
                page_texts.append(page.get_text("text").rstrip("\n"))

        return page_texts
