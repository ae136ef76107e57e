"""Pure navigator state transitions.

``reduce(state, event, ctx)`` never mutates its input; it returns the next
state plus the commands the executor should carry out.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from pdfnav.fuzzy import find
from pdfnav.navigator.commands import Command, ExtractSegments, OpenViewer, Quit
from pdfnav.navigator.events import (
    Event,
    ExtractionDone,
    KeyPressed,
    MouseAction,
    MouseInput,
    Resized,
    ViewerLaunched,
)
from pdfnav.navigator.layout import (
    TIMELINE_ROW,
    input_row,
    page_at_x,
    results_start,
    results_visible,
)
from pdfnav.navigator.model import (
    ExtractionOutcome,
    InputMode,
    NavigatorContext,
    NavigatorState,
    ViewMode,
)
from pdfnav.segments import SegmentModel

logger = logging.getLogger(__name__)

Transition = tuple[NavigatorState, list[Command]]

NO_SPLITS_WARNING = "⚠ no split points — x to mark"


def initial_state(
    ctx: NavigatorContext, view: ViewMode = ViewMode.SEARCH, query: str = ""
) -> NavigatorState:
    """Fresh session state; an initial query starts in Insert mode with matches."""
    state = NavigatorState(segments=SegmentModel(ctx.page_count), view=view)
    if query:
        state = replace(
            state, input_mode=InputMode.INSERT, query=query, query_cursor=len(query)
        )
        state = _recompute(state, ctx)
    return state


def reduce(state: NavigatorState, event: Event, ctx: NavigatorContext) -> Transition:
    """Apply one event to ``state``.

    Key and mouse input is ignored while an extraction is running or after
    the session has finished.

    Raises:
        TypeError: For an event type the navigator does not know.
    """
    if isinstance(event, Resized):
        return replace(state, width=event.width, height=event.height), []
    if isinstance(event, ExtractionDone):
        return _extraction_done(state, event)
    if isinstance(event, ViewerLaunched):
        status = f"viewer: {event.error}" if event.error else ""
        return replace(state, status=status), []

    if isinstance(event, (KeyPressed, MouseInput)):
        if state.busy or state.finished:
            return state, []
        if isinstance(event, MouseInput):
            return _mouse(state, event, ctx)
        if state.insert_mode:
            return _insert_key(state, event.key, ctx)
        return _normal_key(state, event.key, ctx)

    raise TypeError(f"unknown navigator event: {event!r}")


def active_page(state: NavigatorState, ctx: NavigatorContext) -> int:
    """Page the viewer would open: the current page in Split view, else the
    page of the match under the cursor (0 when there is none)."""
    if state.view is ViewMode.SPLIT:
        return state.current_page
    if state.matches and state.cursor < len(state.matches):
        return ctx.lines[state.matches[state.cursor].index].page
    return 0


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------


def _normal_key(state: NavigatorState, key: str, ctx: NavigatorContext) -> Transition:
    if key in ("ctrl+c", "esc", "q"):
        return _quit(state)
    if key == "enter":
        return _confirm(state, ctx)
    if key == "tab":
        return _toggle_view(state), []
    if key in ("o", "ctrl+o"):
        return _open_viewer(state, ctx)
    if key in ("k", "up"):
        return _move_result(state, ctx, -1), []
    if key in ("j", "down"):
        return _move_result(state, ctx, 1), []
    if key == "/":
        return replace(state, input_mode=InputMode.INSERT), []
    if state.view is ViewMode.SPLIT:
        return _split_key(state, key)
    return state, []


def _split_key(state: NavigatorState, key: str) -> Transition:
    if key in ("h", "left"):
        return _set_page(state, state.current_page - 1), []
    if key in ("l", "right"):
        return _set_page(state, state.current_page + 1), []
    if key == "g":
        return _set_page(state, 1), []
    if key == "G":
        return _set_page(state, state.segments.page_count), []
    if key == "x":
        return _mark_split(state), []
    if key == "e":
        return _extract_current(state)
    return state, []


def _insert_key(state: NavigatorState, key: str, ctx: NavigatorContext) -> Transition:
    if key == "ctrl+c":
        return _quit(state)
    if key == "esc":
        return replace(state, input_mode=InputMode.NORMAL), []
    if key == "tab":
        return _toggle_view(replace(state, input_mode=InputMode.NORMAL)), []
    if key == "ctrl+o":
        return _open_viewer(state, ctx)
    if key == "enter":
        return _confirm(state, ctx)
    if key in ("up", "ctrl+p"):
        return _move_result(state, ctx, -1), []
    if key in ("down", "ctrl+n"):
        return _move_result(state, ctx, 1), []

    query, caret = edit_query(state.query, state.query_cursor, key)
    return _recompute(replace(state, query=query, query_cursor=caret), ctx), []


def edit_query(text: str, caret: int, key: str) -> tuple[str, int]:
    """Apply one editing key to a single-line input; returns ``(text, caret)``.

    Printable characters are inserted at the caret. Unknown keys leave the
    input unchanged.
    """
    caret = max(0, min(caret, len(text)))
    if len(key) == 1:
        if key.isprintable():
            return text[:caret] + key + text[caret:], caret + 1
        return text, caret
    if key == "backspace":
        if caret == 0:
            return text, caret
        return text[: caret - 1] + text[caret:], caret - 1
    if key == "delete":
        return text[:caret] + text[caret + 1 :], caret
    if key == "left":
        return text, max(0, caret - 1)
    if key == "right":
        return text, min(len(text), caret + 1)
    if key in ("home", "ctrl+a"):
        return text, 0
    if key in ("end", "ctrl+e"):
        return text, len(text)
    if key == "ctrl+u":
        return text[caret:], 0
    if key == "ctrl+w":
        start = caret
        while start > 0 and text[start - 1].isspace():
            start -= 1
        while start > 0 and not text[start - 1].isspace():
            start -= 1
        return text[:start] + text[caret:], start
    return text, caret


# ---------------------------------------------------------------------------
# Mouse
# ---------------------------------------------------------------------------


def _mouse(state: NavigatorState, event: MouseInput, ctx: NavigatorContext) -> Transition:
    if event.action is MouseAction.WHEEL_UP:
        return _move_result(state, ctx, -1), []
    if event.action is MouseAction.WHEEL_DOWN:
        return _move_result(state, ctx, 1), []

    if event.y == input_row(state.height):
        return replace(state, input_mode=InputMode.INSERT), []
    if state.view is ViewMode.SPLIT and event.y == TIMELINE_ROW:
        page = page_at_x(event.x, state.width, state.segments.page_count, state.split_points)
        if page:
            state = replace(state, current_page=page)
        return state, []

    index = event.y - results_start(state.view) + state.offset
    if 0 <= index < len(state.matches):
        state = _follow_match(replace(state, cursor=index), ctx)
    return state, []


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def _quit(state: NavigatorState) -> Transition:
    return replace(state, finished=True), [Quit()]


def _confirm(state: NavigatorState, ctx: NavigatorContext) -> Transition:
    if state.view is ViewMode.SEARCH:
        selected = None
        if state.matches and state.cursor < len(state.matches):
            selected = ctx.lines[state.matches[state.cursor].index]
        return replace(state, selected=selected, finished=True), [Quit()]

    if not state.split_points:
        return replace(state, status=NO_SPLITS_WARNING), []
    segments = tuple(state.segments.build_segments())
    logger.debug("Splitting into %d segments", len(segments))
    return (
        replace(state, busy=True, status="splitting all segments…"),
        [ExtractSegments(segments)],
    )


def _extract_current(state: NavigatorState) -> Transition:
    if not state.split_points:
        return state, []
    segment = state.segments.current_segment(state.current_page)
    return (
        replace(state, busy=True, status=f"extracting {segment}…"),
        [ExtractSegments((segment,))],
    )


def _extraction_done(state: NavigatorState, event: ExtractionDone) -> Transition:
    if event.error:
        status = f"error: {event.error}"
    else:
        status = f"✓ created {event.count} file(s)"
    outcome = ExtractionOutcome(count=event.count, error=event.error)
    return (
        replace(state, busy=False, status=status, outcome=outcome, finished=True),
        [Quit()],
    )


def _toggle_view(state: NavigatorState) -> NavigatorState:
    view = ViewMode.SPLIT if state.view is ViewMode.SEARCH else ViewMode.SEARCH
    return replace(state, view=view, status="")


def _open_viewer(state: NavigatorState, ctx: NavigatorContext) -> Transition:
    page = active_page(state, ctx)
    if page <= 0:
        return replace(state, status="no page selected"), []
    return replace(state, status=f"opening p.{page} in viewer…"), [OpenViewer(page)]


def _set_page(state: NavigatorState, page: int) -> NavigatorState:
    page = max(1, min(page, state.segments.page_count))
    return replace(state, current_page=page)


def _mark_split(state: NavigatorState) -> NavigatorState:
    if state.current_page <= 1:
        return state
    return replace(
        state,
        segments=state.segments.toggle(state.current_page),
        query="",
        query_cursor=0,
        matches=(),
        cursor=0,
        offset=0,
    )


def _move_result(state: NavigatorState, ctx: NavigatorContext, delta: int) -> NavigatorState:
    target = state.cursor + delta
    if not 0 <= target < len(state.matches):
        return state
    visible = max(1, results_visible(state.view, state.height))
    offset = state.offset
    if target < offset:
        offset = target
    elif target >= offset + visible:
        offset = target - visible + 1
    return _follow_match(replace(state, cursor=target, offset=offset), ctx)


def _recompute(state: NavigatorState, ctx: NavigatorContext) -> NavigatorState:
    if not state.query:
        return replace(state, matches=(), cursor=0, offset=0)
    matches = tuple(find(state.query, ctx.texts))
    if state.cursor >= len(matches):
        state = replace(state, cursor=0, offset=0)
    return _follow_match(replace(state, matches=matches), ctx)


def _follow_match(state: NavigatorState, ctx: NavigatorContext) -> NavigatorState:
    """In Split view the current page tracks the match under the cursor."""
    if state.view is ViewMode.SPLIT and state.matches:
        return replace(state, current_page=ctx.lines[state.matches[state.cursor].index].page)
    return state
