"""Curses terminal surface for the navigator.

Translates raw curses input into navigator events and paints rendered
frames. All state handling lives in :mod:`pdfnav.navigator`.
"""

from __future__ import annotations

import curses
import logging
import os

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from pdfnav.config import NavigatorConfig
from pdfnav.document import PdfDocument
from pdfnav.executor import run_event_loop
from pdfnav.navigator import (
    Event,
    Frame,
    KeyPressed,
    MouseAction,
    MouseInput,
    Navigator,
    NavigatorContext,
    NavigatorState,
    Resized,
    Style,
)
from pdfnav.text_index import Line

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.02  # seconds between input polls
ESCAPE_DELAY_MS = "25"

# curses only defines BUTTON5 on newer ncurses builds
BUTTON5_PRESSED = getattr(curses, "BUTTON5_PRESSED", 0x200000)

_CHAR_KEYS = {
    "\x03": "ctrl+c",
    "\x1b": "esc",
    "\n": "enter",
    "\r": "enter",
    "\t": "tab",
    "\x0f": "ctrl+o",
    "\x10": "ctrl+p",
    "\x0e": "ctrl+n",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x01": "ctrl+a",
    "\x05": "ctrl+e",
    "\x15": "ctrl+u",
    "\x17": "ctrl+w",
}

_CURSES_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_ENTER: "enter",
}

# Foreground colours cycled across segments
SEGMENT_COLORS = (
    curses.COLOR_BLUE,
    curses.COLOR_GREEN,
    curses.COLOR_MAGENTA,
    curses.COLOR_YELLOW,
    curses.COLOR_RED,
)


def translate_key(key: str | int) -> str | None:
    """Normalised key name for a ``get_wch`` result, or None to ignore it."""
    if isinstance(key, int):
        return _CURSES_KEYS.get(key)
    if key in _CHAR_KEYS:
        return _CHAR_KEYS[key]
    if key.isprintable():
        return key
    return None


def translate_mouse(bstate: int, x: int, y: int) -> MouseInput | None:
    if bstate & curses.BUTTON4_PRESSED:
        return MouseInput(MouseAction.WHEEL_UP, x, y)
    if bstate & BUTTON5_PRESSED:
        return MouseInput(MouseAction.WHEEL_DOWN, x, y)
    if bstate & (curses.BUTTON1_PRESSED | curses.BUTTON1_CLICKED):
        return MouseInput(MouseAction.LEFT_PRESS, x, y)
    return None


class _Palette:
    """Maps view styles to curses attributes."""

    def __init__(self) -> None:
        self._colors = curses.has_colors()
        if self._colors:
            self._init_pairs()
        bold = curses.A_BOLD
        self._attrs = {
            Style.DEFAULT: curses.A_NORMAL,
            Style.DIM: curses.A_DIM,
            Style.HEADER: bold,
            Style.TAB_ACTIVE: bold | self._pair(5),
            Style.SELECTED: curses.A_REVERSE,
            Style.PAGE: self._pair(1),
            Style.MATCH: bold | self._pair(2),
            Style.PROMPT: bold | self._pair(3),
            Style.INSERT_BADGE: bold | self._pair(3),
            Style.NORMAL_BADGE: bold | self._pair(4),
        }
        self._segments = [self._pair(10 + slot) for slot in range(len(SEGMENT_COLORS))]

    @staticmethod
    def _init_pairs() -> None:
        curses.start_color()
        try:
            curses.use_default_colors()
            background = -1
        except curses.error:
            background = curses.COLOR_BLACK
        curses.init_pair(1, curses.COLOR_CYAN, background)
        curses.init_pair(2, curses.COLOR_YELLOW, background)
        curses.init_pair(3, curses.COLOR_GREEN, background)
        curses.init_pair(4, curses.COLOR_BLUE, background)
        curses.init_pair(5, curses.COLOR_BLACK, curses.COLOR_GREEN)
        for slot, color in enumerate(SEGMENT_COLORS):
            curses.init_pair(10 + slot, color, background)

    def _pair(self, number: int) -> int:
        return curses.color_pair(number) if self._colors else 0

    def attr(self, style: Style, segment: int = 0) -> int:
        if style in (Style.TIMELINE_PAGE, Style.SEGMENT):
            return self._segments[segment] | (curses.A_BOLD if style is Style.SEGMENT else 0)
        if style is Style.TIMELINE_CURRENT:
            return self._segments[segment] | curses.A_REVERSE | curses.A_BOLD
        if style is Style.SEGMENT_ACTIVE:
            return self._segments[segment] | curses.A_BOLD | curses.A_UNDERLINE
        return self._attrs.get(style, curses.A_NORMAL)


class CursesTerminal:
    """Draws frames on a curses window and pumps its input into an event stream."""

    def __init__(self, screen: curses.window) -> None:
        self.screen = screen
        self.palette: _Palette | None = None

    def setup(self) -> None:
        curses.raw()
        curses.noecho()
        self.screen.keypad(True)
        self.screen.nodelay(True)
        curses.mousemask(
            curses.BUTTON1_PRESSED
            | curses.BUTTON1_CLICKED
            | curses.BUTTON4_PRESSED
            | BUTTON5_PRESSED
        )
        curses.mouseinterval(0)
        self.palette = _Palette()

    def size(self) -> Resized:
        height, width = self.screen.getmaxyx()
        return Resized(width, height)

    def read_event(self) -> Event | None:
        try:
            key = self.screen.get_wch()
        except curses.error:
            return None
        if key == curses.KEY_RESIZE:
            return self.size()
        if key == curses.KEY_MOUSE:
            try:
                _, x, y, _, bstate = curses.getmouse()
            except curses.error:
                return None
            return translate_mouse(bstate, x, y)
        name = translate_key(key)
        return KeyPressed(name) if name else None

    async def pump(self, events: MemoryObjectSendStream) -> None:
        async with events:
            while True:
                event = self.read_event()
                if event is None:
                    await anyio.sleep(POLL_INTERVAL)
                    continue
                await events.send(event)

    def draw(self, frame: Frame) -> None:
        height, width = self.screen.getmaxyx()
        self.screen.erase()
        for y, row in enumerate(frame.rows[:height]):
            x = 0
            for span in row:
                text = span.text[: max(0, width - x)]
                if not text:
                    break
                try:
                    self.screen.addstr(y, x, text, self.palette.attr(span.style, span.segment))
                except curses.error:
                    # writing the bottom-right cell moves the cursor off screen
                    pass
                x += len(text)
        self._place_cursor(frame, height, width)
        self.screen.refresh()

    def _place_cursor(self, frame: Frame, height: int, width: int) -> None:
        try:
            if frame.cursor is None:
                curses.curs_set(0)
                return
            row, col = frame.cursor
            curses.curs_set(1)
            self.screen.move(min(row, height - 1), min(col, width - 1))
        except curses.error:
            logger.debug("Terminal cannot position the cursor")


def _session(
    screen: curses.window, navigator: Navigator, document: PdfDocument, config: NavigatorConfig
) -> NavigatorState:
    terminal = CursesTerminal(screen)
    terminal.setup()
    navigator.dispatch(terminal.size())
    return anyio.run(run_event_loop, navigator, document, config.viewer, terminal)


def run_navigator(
    document: PdfDocument, lines: list[Line], config: NavigatorConfig
) -> NavigatorState:
    """Run an interactive session on the terminal and return its final state."""
    ctx = NavigatorContext.create(document.path, document.page_count, lines, config.output_dir)
    navigator = Navigator.start(ctx, config.start_view, config.initial_query)
    os.environ.setdefault("ESCDELAY", ESCAPE_DELAY_MS)
    logger.debug("Starting navigator on %s (%d lines)", document.path, len(lines))
    return curses.wrapper(_session, navigator, document, config)
