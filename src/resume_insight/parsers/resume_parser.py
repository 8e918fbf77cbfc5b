"""Plain-text extraction for uploaded resumes (PDF, DOCX, TXT, MD)."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from resume_insight.errors import InvalidInputError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".pdf", ".docx", ".txt", ".md")

# Contact icons pasted from document exports
ICON_PATTERN = (
    r"[\U0001f4e7\U0001f4de\U0001f4cd\U0001f4bc\U0001f4c5\U0001f393"
    r"\U0001f3e2\U0001f4dd\U0001f4c4\U0001f517\U0001f310\U0001f4f1"
    r"\u260e\u2709\u2706]\s*"
)

_INVISIBLE = re.compile(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]")
_BULLETS = re.compile(r"^(\s*)[●•◦◆■▪○]\s*", re.MULTILINE)


def extract_text(file_path: str | Path) -> str:
    """Return the normalized text of a resume file.

    Raises InvalidInputError for unsupported formats or files without text.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        text = _read_pdf(path)
    elif suffix == ".docx":
        text = _read_docx(path)
    elif suffix in (".txt", ".md"):
        text = path.read_text(encoding="utf-8", errors="replace")
    else:
        raise InvalidInputError(
            f"unsupported resume format {suffix or '(none)'}; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )

    text = normalize_text(text)
    if not text:
        raise InvalidInputError(f"no text found in {path.name}")
    logger.debug("Extracted %d chars from %s", len(text), path.name)
    return text


def normalize_text(text: str) -> str:
    """Strip export artifacts, unify bullets to '- ' and collapse spacing."""
    text = _INVISIBLE.sub("", text)
    text = re.sub(ICON_PATTERN, "", text)
    text = _BULLETS.sub(r"\1- ", text)

    lines = []
    for line in text.splitlines():
        body = line.lstrip()
        indent = " " * len(line[: len(line) - len(body)].replace("\t", "    "))
        body = re.sub(r"[ \t]{2,}", " ", body).rstrip()
        lines.append(f"{indent}{body}" if body else "")

    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def _read_pdf(path: Path) -> str:
    import fitz  # pymupdf

    with fitz.open(str(path)) as doc:
        return "\n".join(page.get_text() for page in doc)


def _read_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
