"""Tests for resume text extraction."""

from pathlib import Path

import pytest
from docx import Document

from resume_insight.errors import InvalidInputError
from resume_insight.parsers.resume_parser import extract_text, normalize_text


class TestExtractText:
    def test_txt_file(self, tmp_path):
        path = tmp_path / "resume.txt"
        path.write_text("Jane Doe\nExperience: ...", encoding="utf-8")
        assert extract_text(path).startswith("Jane Doe")

    def test_md_file(self, tmp_path):
        path = tmp_path / "resume.md"
        path.write_text("# Jane Doe\n## Experience", encoding="utf-8")
        assert "# Jane Doe" in extract_text(str(path))

    def test_docx_file(self, tmp_path):
        path = tmp_path / "resume.docx"
        doc = Document()
        doc.add_paragraph("Jane Doe")
        doc.add_paragraph("")
        doc.add_paragraph("Backend Engineer")
        doc.save(str(path))
        assert extract_text(path) == "Jane Doe\nBackend Engineer"

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "resume.xyz"
        path.write_text("test")
        with pytest.raises(InvalidInputError, match="unsupported resume format"):
            extract_text(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "resume.txt"
        path.write_text(" \n\u200b\n")
        with pytest.raises(InvalidInputError, match="no text"):
            extract_text(path)


class TestNormalizeText:
    def test_removes_contact_icons(self):
        text = "\U0001f4e7jane@example.com\n\U0001f4de+1 555 0100"
        result = normalize_text(text)
        assert result == "jane@example.com\n+1 555 0100"

    def test_removes_invisible_characters(self):
        assert normalize_text("\ufeffJane\u200b Doe\u00ad") == "Jane Doe"

    def test_normalizes_bullets(self):
        result = normalize_text("● Go\n  • Redis\n■ Docker")
        assert result.splitlines() == ["- Go", "  - Redis", "- Docker"]

    def test_collapses_spaces_and_blank_lines(self):
        result = normalize_text("Jane    Doe  \n\n\n\n\tBackend")
        assert result == "Jane Doe\n\n    Backend"
