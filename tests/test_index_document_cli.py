"""test_index_document_cli.py
Test the command line entry point.
"""

import sys

import pytest

import index_document_cli
from index_document_cli import main, parse_args


class TestParseArgs:
    def test_files_and_search(self):
        assert parse_args(["a.txt", "--search", "python sql", "b.pdf"]) == (["a.txt", "b.pdf"], "python sql")

    def test_files_only(self):
        assert parse_args(["a.txt"]) == (["a.txt"], None)

    def test_search_without_value(self):
        with pytest.raises(ValueError):
            parse_args(["a.txt", "--search"])


class TestMain:
    def test_indexes_and_searches(self, tmp_path, monkeypatch, capsys):
        resume = tmp_path / "resume.txt"
        resume.write_text("EXPERIENCE:\nBuilt Python services\nEDUCATION:\nState University")
        notes = tmp_path / "notes.md"
        notes.write_text("SKILLS\n- excel")

        monkeypatch.setattr(sys, "argv", ["index_document_cli.py", str(resume), str(notes), "--search", "python"])
        main()

        output = capsys.readouterr().out
        assert "[experience] EXPERIENCE:" in output
        assert "[education] EDUCATION:" in output
        assert "[skills] SKILLS" in output
        assert "Search 'python': 1 match(es)" in output
        assert "  - resume.txt" in output

    def test_missing_file_exits_with_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["index_document_cli.py", str(tmp_path / "missing.txt")])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Failed to index" in capsys.readouterr().out

    def test_no_arguments_prints_usage(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["index_document_cli.py"])

        with pytest.raises(SystemExit):
            main()

        assert index_document_cli.USAGE in capsys.readouterr().out
