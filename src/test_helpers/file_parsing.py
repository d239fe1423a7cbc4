"""file_parsing.py
Helper functions to build in-memory test files.
"""

import zipfile
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

import pymupdf

from src.models import ParsedText, RawFile
from src.parse_classes.file_parser.file_parser import FileParser
from src.parse_classes.file_parser.helpers.check_file_format import (
    DOCX_TYPE,
    PDF_TYPE,
    PLAIN_TEXT_TYPE,
)

WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


# DummyTxtParser to test with
class DummyTxtParser(FileParser):
    """Simple subclass of FileParser to test validation logic."""
    SUPPORTED_FORMATS = ["text/plain"]

    def parse(self) -> ParsedText:
        return self._build_parsed_text([self.raw_file.content.decode("utf-8")])


def make_text_file(
    text: str,
    filename: str = "resume.txt",
    declared_type: str = PLAIN_TEXT_TYPE,
    size: Optional[int] = None,
) -> RawFile:
    """Wrap ``text`` into a UTF-8 encoded ``RawFile``."""
    return RawFile(
        content=text.encode("utf-8"),
        filename=filename,
        declared_type=declared_type,
        size=size,
    )


def build_pdf_bytes(page_texts: List[str]) -> bytes:
    """Render one PDF page per entry of ``page_texts`` using PyMuPDF."""
    doc = pymupdf.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


def make_pdf_file(page_texts: List[str], filename: str = "resume.pdf") -> RawFile:
    return RawFile(
        content=build_pdf_bytes(page_texts),
        filename=filename,
        declared_type=PDF_TYPE,
    )


def build_docx_bytes(paragraphs: List[str]) -> bytes:
    """Build a minimal DOCX archive holding one paragraph per entry."""
    body = "".join(
        f"<w:p><w:r><w:t>{escape(paragraph)}</w:t></w:r></w:p>"
        for paragraph in paragraphs
    )
    document_xml = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{WORD_NAMESPACE}"><w:body>{body}</w:body></w:document>'
    )
    content_types = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Override PartName="/word/document.xml" ContentType="application/'
        'vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
        '</Types>'
    )

    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", content_types)
        archive.writestr("word/document.xml", document_xml)
    return buffer.getvalue()


def make_docx_file(paragraphs: List[str], filename: str = "resume.docx") -> RawFile:
    return RawFile(
        content=build_docx_bytes(paragraphs),
        filename=filename,
        declared_type=DOCX_TYPE,
    )
