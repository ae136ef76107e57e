"""
Page selection expressions.

Both flavours share one grammar: comma-separated tokens, each either a single
page or an ``A-B`` range.

* raw index mode - tokens are 1-based physical page numbers;
* label mode - tokens are printed page labels (``"iv"``, ``"A-3"``, ``"12"``).

The result is the list of physical pages in first-seen order with duplicates
dropped; it is never re-sorted.
"""

from __future__ import annotations

from pdfnav.errors import PageRangeError
from pdfnav.labels import LabelMap


def _tokens(expr: str) -> list[str]:
    return [part.strip() for part in expr.split(",") if part.strip()]


def _parse_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise PageRangeError(f"invalid page number: {text.strip()!r}") from None


class _OrderedPages:
    def __init__(self) -> None:
        self.pages: list[int] = []
        self._seen: set[int] = set()

    def add(self, page: int) -> None:
        if page not in self._seen:
            self._seen.add(page)
            self.pages.append(page)

    def result(self) -> list[int]:
        if not self.pages:
            raise PageRangeError("no valid pages specified")
        return self.pages


def parse_page_ranges(expr: str, page_count: int) -> list[int]:
    """Resolve a raw-index expression such as ``"1-3,5"``.

    Args:
        expr: Comma-separated 1-based pages and ``start-end`` ranges.
        page_count: Number of pages in the document.

    Returns:
        Physical pages in first-seen order.

    Raises:
        PageRangeError: For malformed tokens, pages outside
            ``[1, page_count]``, reversed ranges or an empty selection.
    """
    out = _OrderedPages()
    for token in _tokens(expr):
        if "-" in token:
            bounds = token.split("-")
            if len(bounds) != 2:
                raise PageRangeError(f"invalid range format: {token!r}")
            start, end = _parse_int(bounds[0]), _parse_int(bounds[1])
            if start < 1 or end > page_count:
                raise PageRangeError(
                    f"page range {start}-{end} out of bounds "
                    f"(document has {page_count} pages)"
                )
            if start > end:
                raise PageRangeError(f"invalid range: start ({start}) > end ({end})")
            for page in range(start, end + 1):
                out.add(page)
        else:
            page = _parse_int(token)
            if page < 1 or page > page_count:
                raise PageRangeError(
                    f"page {page} out of bounds (document has {page_count} pages)"
                )
            out.add(page)
    return out.result()


def resolve_label_ranges(expr: str, label_map: LabelMap) -> list[int]:
    """Resolve a printed-label expression such as ``"ii-iv,7"``.

    A single label selects every physical page carrying it. A range runs from
    the first physical page of the start label to the last physical page of
    the end label. Labels may contain "-" themselves ("A-1"): a token that is
    a known label is taken whole, and a range is split at the first "-" whose
    two sides are both known labels.

    Raises:
        PageRangeError: For unknown labels, reversed ranges or an empty selection.
    """
    out = _OrderedPages()
    for token in _tokens(expr):
        if token in label_map:
            for page in label_map[token]:
                out.add(page)
        elif "-" in token:
            start_label, end_label = _split_label_range(token, label_map)
            start_pages = _lookup(label_map, start_label)
            end_pages = _lookup(label_map, end_label)
            start, end = start_pages[0], end_pages[-1]
            if start > end:
                raise PageRangeError(
                    f"invalid range: page {start_label!r} (PDF page {start}) comes "
                    f"after page {end_label!r} (PDF page {end})"
                )
            for page in range(start, end + 1):
                out.add(page)
        else:
            for page in _lookup(label_map, token):
                out.add(page)
    return out.result()


def _split_label_range(token: str, label_map: LabelMap) -> tuple[str, str]:
    parts = token.split("-")
    for i in range(1, len(parts)):
        start, end = "-".join(parts[:i]).strip(), "-".join(parts[i:]).strip()
        if start in label_map and end in label_map:
            return start, end
    start, end = token.split("-", 1)
    return start.strip(), end.strip()


def _lookup(label_map: LabelMap, label: str) -> list[int]:
    pages = label_map.get(label)
    if not pages:
        raise PageRangeError(f"page label {label!r} not found in PDF")
    return pages


def sanitize_range(expr: str) -> str:
    """Filename fragment for an expression: ``"1-3,5"`` -> ``"1-3_5"``."""
    return expr.replace(",", "_").replace(" ", "")
