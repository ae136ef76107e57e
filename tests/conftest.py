from pathlib import Path

import fitz  # PyMuPDF
import pytest

SAMPLE_PAGES = [
    "Preface\nHow to read this book",
    "Table of Contents\nIntroduction ... 1",
    "",
    "Introduction\nThe quick brown fox",
    "Chapter One\nNeural networks learn representations",
    "Chapter Two\nGradient descent and backpropagation",
    "Chapter Three\nRecurrent models",
    "Index\nbackpropagation, 6",
]

# i, ii, iii, iv, v, then 1, 2, 3
ROMAN_FRONT_MATTER = [
    {"startpage": 0, "prefix": "", "style": "r", "firstpagenum": 1},
    {"startpage": 5, "prefix": "", "style": "D", "firstpagenum": 1},
]


def write_pdf(path: Path, pages: list[str], labels: list[dict] | None = None) -> Path:
    """Create a PDF with one page per entry in ``pages`` (empty string = blank page)."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    if labels:
        doc.set_page_labels(labels)
    doc.save(path)
    doc.close()
    return path


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """An 8-page PDF with text on every page but the third."""
    return write_pdf(tmp_path / "book.pdf", SAMPLE_PAGES)


@pytest.fixture
def roman_pdf(tmp_path: Path) -> Path:
    """An 8-page PDF labelled i-v followed by 1-3."""
    return write_pdf(tmp_path / "roman.pdf", SAMPLE_PAGES, ROMAN_FRONT_MATTER)


@pytest.fixture
def blank_pdf(tmp_path: Path) -> Path:
    return write_pdf(tmp_path / "blank.pdf", ["", "", ""])
