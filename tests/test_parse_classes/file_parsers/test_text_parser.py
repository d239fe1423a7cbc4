"""test_text_parser.py
Comprehensive test suite for:
  - PlainTextParser
"""

import pytest

from src.exceptions import FileReadError, UnsupportedFormatError
from src.models import ParsedText, RawFile

from src.test_helpers.file_parsing import make_text_file
from src.parse_classes.file_parser.text_parser import PlainTextParser


class TestPlainTextParser:
    """Tests for the PlainTextParser class."""

    def test_decodes_text_directly(self):
        text = "SUMMARY\nPython developer\n\nSKILLS\nSQL"
        parsed = PlainTextParser(make_text_file(text)).parse()

        assert isinstance(parsed, ParsedText)
        assert parsed.text == text

    def test_single_synthesized_page(self):
        parsed = PlainTextParser(make_text_file("line one\nline two")).parse()

        assert len(parsed.pages) == 1
        page = parsed.pages[0]
        assert page.page_number == 1
        assert page.content == "line one\nline two"
        assert (page.dimensions.width, page.dimensions.height) == (612, 792)

    def test_text_blocks_skip_blank_lines(self):
        parsed = PlainTextParser(make_text_file("EDUCATION\n\n  School Z  \n")).parse()
        blocks = parsed.pages[0].text_blocks

        assert [block.text for block in blocks] == ["EDUCATION", "School Z"]
        assert [block.id for block in blocks] == ["block-0", "block-2"]
        # Vertical offset follows the source line index, blank lines included
        assert blocks[0].position.y == 50
        assert blocks[1].position.y == 90

    def test_markdown_is_supported(self):
        raw_file = make_text_file("# Notes", filename="notes.md", declared_type="text/markdown")
        assert PlainTextParser(raw_file).parse().text == "# Notes"

    def test_byte_order_mark_is_dropped(self):
        raw_file = RawFile(content=b"\xef\xbb\xbfHello", filename="bom.txt", declared_type="text/plain")
        assert PlainTextParser(raw_file).parse().text == "Hello"

    def test_crlf_line_endings_are_normalized(self):
        parsed = PlainTextParser(make_text_file("SKILLS:\r\nSQL\r\n")).parse()
        assert parsed.text == "SKILLS:\nSQL\n"

    def test_invalid_utf8_raises_file_read_error(self):
        raw_file = RawFile(content=b"\xff\xfe\xfa", filename="bad.txt", declared_type="text/plain")

        with pytest.raises(FileReadError) as exc_info:
            PlainTextParser(raw_file).parse()

        assert exc_info.value.stage == "parse"
        assert exc_info.value.identifier == "bad.txt"

    def test_empty_file_parses_to_empty_text(self):
        parsed = PlainTextParser(make_text_file("")).parse()
        assert parsed.text == ""
        assert parsed.pages[0].text_blocks == ()

    def test_pdf_declared_type_rejected(self):
        with pytest.raises(UnsupportedFormatError):
            PlainTextParser(make_text_file("x", declared_type="application/pdf"))
