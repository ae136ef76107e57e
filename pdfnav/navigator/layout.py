"""Screen geometry shared by the renderer and mouse hit-testing.

Search view rows::

    0 header | 1 separator | 2.. results | separator | input | hints

Split view rows::

    0 header | 1 timeline | 2 blank | 3 segments | 4 files | 5 blank
    6 separator | 7.. results | separator | input | hints
"""

from __future__ import annotations

from collections.abc import Iterator, Set

from pdfnav.navigator.model import ViewMode

TIMELINE_ROW = 1
TIMELINE_INDENT = 2
SPLIT_MARKER = " │ "
MAX_PAGE_WIDTH = 4

_CHROME_ROWS = {ViewMode.SEARCH: 5, ViewMode.SPLIT: 10}
_RESULTS_START = {ViewMode.SEARCH: 2, ViewMode.SPLIT: 7}


def results_visible(view: ViewMode, height: int) -> int:
    """Number of result rows that fit on screen."""
    return max(0, height - _CHROME_ROWS[view])


def results_start(view: ViewMode) -> int:
    return _RESULTS_START[view]


def input_row(height: int) -> int:
    return height - 2


def timeline_page_width(width: int, page_count: int, split_count: int) -> int:
    """Columns per page cell: the free width shared out, clamped to ``[1, 4]``."""
    if page_count <= 0:
        return 1
    available = width - 4 - split_count * len(SPLIT_MARKER)
    return max(1, min(MAX_PAGE_WIDTH, available // page_count))


def timeline_cells(
    width: int, page_count: int, split_points: Set[int]
) -> Iterator[tuple[int, int, int]]:
    """Yield ``(page, x, cell_width)`` for every page cell of the timeline."""
    cell = timeline_page_width(width, page_count, len(split_points))
    x = TIMELINE_INDENT
    for page in range(1, page_count + 1):
        if page > 1 and page in split_points:
            x += len(SPLIT_MARKER)
        yield page, x, cell
        x += cell


def page_at_x(x: int, width: int, page_count: int, split_points: Set[int]) -> int:
    """Page under terminal column ``x`` on the timeline row, or 0 for none."""
    for page, start, cell in timeline_cells(width, page_count, split_points):
        if start <= x < start + cell:
            return page
        if x < start:
            break
    return 0
