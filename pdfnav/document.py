"""
Document service backed by PyMuPDF.

Everything that touches the PDF object graph or writes files lives here; the
rest of the package only sees :class:`PdfDocument` and plain Python values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import fitz  # PyMuPDF

from pdfnav.errors import DocumentError
from pdfnav.pdfobj import PdfSyntaxError, Ref, parse_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageLabelTree:
    """Root of a ``/PageLabels`` number tree plus a dereferencing hook.

    ``root`` is either a parsed dictionary or a :class:`Ref`; ``resolve``
    turns any :class:`Ref` into the parsed object it points at and raises
    :class:`DocumentError` when it cannot.
    """

    root: Any
    resolve: Callable[[Any], Any]


class PdfDocument:
    """An open, read-only PDF.

    Use :meth:`open` rather than the constructor::

        with PdfDocument.open("book.pdf") as doc:
            print(doc.page_count)
    """

    def __init__(self, doc: fitz.Document, path: Path) -> None:
        self._doc = doc
        self.path = path

    @classmethod
    def open(cls, path: str | Path) -> PdfDocument:
        pdf_path = Path(path)
        if not pdf_path.exists():
            raise DocumentError(f"input file not found: {path}")
        if pdf_path.suffix.lower() != ".pdf":
            raise DocumentError(f"input file must be a PDF: {path}")
        try:
            doc = fitz.open(pdf_path)
        except Exception as exc:  # mupdf errors do not derive from RuntimeError
            raise DocumentError(f"failed to read PDF {path}: {exc}") from exc
        if not doc.is_pdf:
            doc.close()
            raise DocumentError(f"input file must be a PDF: {path}")
        logger.debug("Opened %s (%d pages)", pdf_path, doc.page_count)
        return cls(doc, pdf_path)

    def __enter__(self) -> PdfDocument:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()

    @property
    def base_name(self) -> str:
        return self.path.stem

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------
    def extract_page_text(self, page: int) -> str:
        """Best-effort plain text of a 1-based page; ``""`` if nothing comes out."""
        try:
            return self._doc.load_page(page - 1).get_text("text") or ""
        except Exception as exc:
            logger.debug("No text from page %d: %s", page, exc)
            return ""

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def collect_pages(self, pages: Iterable[int], output_path: str | Path) -> Path:
        """Write a new PDF holding exactly ``pages`` (1-based, in order).

        Duplicates are allowed and produce repeated pages.

        Raises:
            DocumentError: If a page is out of range or the file cannot be written.
        """
        out_path = Path(output_path)
        selection = list(pages)
        for page in selection:
            if not 1 <= page <= self.page_count:
                raise DocumentError(
                    f"page {page} out of bounds (document has {self.page_count} pages)"
                )

        out = fitz.open()
        try:
            for page in selection:
                out.insert_pdf(self._doc, from_page=page - 1, to_page=page - 1)
            out.save(out_path)
        except Exception as exc:
            raise DocumentError(f"failed to write {out_path}: {exc}") from exc
        finally:
            out.close()
        logger.debug("Wrote %s (%d pages)", out_path, len(selection))
        return out_path

    # ------------------------------------------------------------------
    # Page labels
    # ------------------------------------------------------------------
    def read_page_label_tree(self) -> PageLabelTree | None:
        """Return the catalog's ``/PageLabels`` tree, or ``None`` if absent."""
        try:
            catalog = self._doc.pdf_catalog()
            kind, value = self._doc.xref_get_key(catalog, "PageLabels")
        except Exception as exc:
            logger.warning("Cannot read catalog of %s: %s", self.path, exc)
            return None

        if kind in ("null", "") or not value:
            return None
        try:
            root = parse_object(value)
        except PdfSyntaxError as exc:
            logger.warning("Unreadable /PageLabels entry in %s: %s", self.path, exc)
            return None
        return PageLabelTree(root=root, resolve=self._resolve)

    def _resolve(self, obj: Any) -> Any:
        if not isinstance(obj, Ref):
            return obj
        try:
            source = self._doc.xref_object(obj.xref, compressed=True)
            return parse_object(source)
        except Exception as exc:
            raise DocumentError(f"cannot resolve object {obj.xref} {obj.gen} R: {exc}") from exc
