"""Pure rendering of navigator state into styled rows.

The terminal surface decides what each :class:`Style` looks like; nothing in
here touches the screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from pdfnav.fuzzy import highlight_spans
from pdfnav.navigator.layout import SPLIT_MARKER, results_visible, timeline_cells
from pdfnav.navigator.model import NavigatorContext, NavigatorState, ViewMode
from pdfnav.segments import segment_filename

SEGMENT_COLOR_COUNT = 5

SEARCH_PLACEHOLDER = "  / to search…"
SPLIT_PLACEHOLDER = "  / search · h/l or click timeline to navigate"
INPUT_PROMPT = "  / "

_HINTS = {
    (True, ViewMode.SEARCH): "↑/↓ navigate · enter select · esc normal · tab → split",
    (True, ViewMode.SPLIT): "↑/↓ jump to result · esc normal",
    (False, ViewMode.SEARCH): (
        "/ search · j/k navigate · enter select · o viewer · tab → split · q quit"
    ),
    (False, ViewMode.SPLIT): (
        "/ search · h/l page · j/k results · x mark · e extract · enter split"
        " · g/G first/last · o viewer · tab → search · q quit"
    ),
}


class Style(Enum):
    DEFAULT = auto()
    DIM = auto()
    HEADER = auto()
    TAB_ACTIVE = auto()
    SELECTED = auto()
    PAGE = auto()
    MATCH = auto()
    PROMPT = auto()
    INSERT_BADGE = auto()
    NORMAL_BADGE = auto()
    TIMELINE_PAGE = auto()
    TIMELINE_CURRENT = auto()
    SEGMENT = auto()
    SEGMENT_ACTIVE = auto()


@dataclass(frozen=True)
class Span:
    text: str
    style: Style = Style.DEFAULT
    segment: int = 0  # colour slot for the segment styles


Row = list[Span]


@dataclass(frozen=True)
class Frame:
    rows: list[Row]
    cursor: tuple[int, int] | None = None  # (row, column) of the caret


def row_text(row: Row) -> str:
    return "".join(span.text for span in row)


def render(state: NavigatorState, ctx: NavigatorContext) -> Frame:
    if state.height <= 0:
        return Frame([])

    rows: list[Row] = [_header(state, ctx)]
    if state.view is ViewMode.SPLIT:
        rows.append(_timeline(state))
        rows.append([])
        rows.extend(_segments(state, ctx))
        rows.append([])
        placeholder = SPLIT_PLACEHOLDER
    else:
        placeholder = SEARCH_PLACEHOLDER

    rows.append(_separator(state.width))
    visible = results_visible(state.view, state.height)
    if not state.matches and not state.query and visible > 0:
        rows.append([Span(placeholder, Style.DIM)])
        visible -= 1
    for i in range(state.offset, state.offset + visible):
        rows.append(_result_row(state, ctx, i) if i < len(state.matches) else [])
    rows.append(_separator(state.width))

    cursor = None
    if state.insert_mode:
        cursor = (len(rows), len(INPUT_PROMPT) + state.query_cursor)
    rows.append(_input_row(state))
    rows.append(_hints(state))
    return Frame(rows, cursor)


def _separator(width: int) -> Row:
    return [Span("─" * width, Style.DIM)]


def _header(state: NavigatorState, ctx: NavigatorContext) -> Row:
    splits = len(state.split_points)
    info = f"  {ctx.page_count} pages"
    if state.view is ViewMode.SPLIT and splits:
        info += f"  {splits} split(s) → {splits + 1} seg(s)"
    left = [Span(" " + ctx.base_name, Style.HEADER), Span(info, Style.DIM)]
    tabs = [
        _tab("SEARCH", state.view is ViewMode.SEARCH),
        Span("  "),
        _tab("SPLIT", state.view is ViewMode.SPLIT),
    ]
    pad = state.width - len(row_text(left)) - len(row_text(tabs)) - 2
    return left + [Span(" " * max(1, pad))] + tabs


def _tab(label: str, active: bool) -> Span:
    if active:
        return Span(f" {label} ", Style.TAB_ACTIVE)
    return Span(f"[{label}]", Style.DIM)


def _result_row(state: NavigatorState, ctx: NavigatorContext, i: int) -> Row:
    match = state.matches[i]
    line = ctx.lines[match.index]
    page = f"p.{line.page:<4d}"
    if i == state.cursor:
        return [Span(f"▶ {page:<5}  {line.text}", Style.SELECTED)]
    row = [Span("  "), Span(page, Style.PAGE), Span("  ")]
    for chunk, matched in highlight_spans(line.text, match.matched_indexes):
        row.append(Span(chunk, Style.MATCH if matched else Style.DEFAULT))
    return row


def _input_row(state: NavigatorState) -> Row:
    if state.query:
        return [Span(INPUT_PROMPT, Style.PROMPT), Span(state.query)]
    return [Span(INPUT_PROMPT, Style.PROMPT), Span("search…", Style.DIM)]


def _hints(state: NavigatorState) -> Row:
    if state.insert_mode:
        badge = Span("-- INSERT --", Style.INSERT_BADGE)
    else:
        badge = Span("-- NORMAL --", Style.NORMAL_BADGE)
    text = state.status or _HINTS[(state.insert_mode, state.view)]
    return [badge, Span("  "), Span(text, Style.DIM)]


def _timeline(state: NavigatorState) -> Row:
    model = state.segments
    segment_of = {}
    for slot, segment in enumerate(model.build_segments()):
        for page in segment.pages():
            segment_of[page] = slot % SEGMENT_COLOR_COUNT

    row = [Span("  ")]
    for page, _x, cell in timeline_cells(state.width, model.page_count, state.split_points):
        if page > 1 and model.is_split(page):
            row.append(Span(SPLIT_MARKER, Style.DIM))
        token = f"{page:>{cell - 1}d} " if cell >= 2 else "▪"
        style = Style.TIMELINE_CURRENT if page == state.current_page else Style.TIMELINE_PAGE
        row.append(Span(token, style, segment_of[page]))

    if model.is_split(state.current_page):
        row.append(Span("  ← remove", Style.DIM))
    elif state.current_page > 1:
        row.append(Span("  ← split here", Style.DIM))
    return row


def _segments(state: NavigatorState, ctx: NavigatorContext) -> list[Row]:
    segments = state.segments.build_segments()
    active = state.segments.current_segment(state.current_page)

    labels: Row = [Span("  ")]
    files = []
    for slot, segment in enumerate(segments):
        if slot:
            labels.append(Span("  ·  ", Style.DIM))
        color = slot % SEGMENT_COLOR_COUNT
        if segment == active:
            labels.append(Span(f"▶ {segment}", Style.SEGMENT_ACTIVE, color))
        else:
            labels.append(Span(str(segment), Style.SEGMENT, color))
        files.append(str(segment_filename(ctx.base_name, segment, ctx.output_dir)))

    files_line = "  → " + "  ·  ".join(files)
    if state.width > 1 and len(files_line) > state.width:
        files_line = files_line[: state.width - 1] + "…"
    return [labels, [Span(files_line, Style.DIM)]]
