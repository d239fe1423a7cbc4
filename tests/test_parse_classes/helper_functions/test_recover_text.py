"""test_recover_text.py
Test recover_text()
"""

from src.parse_classes.file_parser.helpers.recover_text import recover_text


class TestRecoverText:
    """Unit tests for best-effort text recovery."""

    def test_keeps_printable_runs(self):
        content = b"\x00\x00EXPERIENCE\x01\x02Built APIs in Python\x00"
        assert recover_text(content) == "EXPERIENCE\nBuilt APIs in Python"

    def test_drops_short_runs(self):
        assert recover_text(b"\x00ab\x00abcd\x00", min_run=4) == "abcd"

    def test_drops_runs_without_letters(self):
        assert recover_text(b"\x001234567890\x00Skills\x00") == "Skills"

    def test_invalid_utf8_does_not_raise(self):
        assert recover_text(b"\xff\xfe\xfdResume text\xff") == "Resume text"

    def test_empty_content(self):
        assert recover_text(b"") == ""
        assert recover_text(b"\x00\x01\x02") == ""

    def test_keeps_unicode_letters(self):
        assert recover_text("\x00Résumé été\x00".encode("utf-8")) == "Résumé été"
