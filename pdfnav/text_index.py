"""Page-tagged text corpus used by search and the navigator."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pdfnav.document import PdfDocument
from pdfnav.errors import NoExtractableTextError

logger = logging.getLogger(__name__)

MIN_LINE_LENGTH = 2


@dataclass(frozen=True)
class Line:
    """A line of text tagged with its 1-based page number."""

    page: int
    text: str


def split_page_text(page: int, text: str) -> list[Line]:
    """Trimmed lines of one page, dropping those shorter than two characters."""
    lines = []
    for raw in text.splitlines():
        stripped = raw.strip()
        if len(stripped) >= MIN_LINE_LENGTH:
            lines.append(Line(page, stripped))
    return lines


def load_lines(document: PdfDocument) -> list[Line]:
    """Extract every page's text in page order.

    Pages without text are skipped silently. The result may be empty; callers
    that need text use :func:`require_lines`.
    """
    lines: list[Line] = []
    for page in range(1, document.page_count + 1):
        text = document.extract_page_text(page)
        if not text:
            continue
        lines.extend(split_page_text(page, text))
    logger.debug("Indexed %d lines from %s", len(lines), document.path)
    return lines


def require_lines(document: PdfDocument) -> list[Line]:
    lines = load_lines(document)
    if not lines:
        raise NoExtractableTextError(f"no extractable text found in {document.path}")
    return lines


def line_texts(lines: list[Line]) -> list[str]:
    return [line.text for line in lines]
