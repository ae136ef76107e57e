"""
Modal navigator: state, events, commands and the pure reducer.

Import from here everywhere else:
    from pdfnav.navigator import Navigator, NavigatorContext, KeyPressed, render
"""
from pdfnav.navigator.commands import Command, ExtractSegments, OpenViewer, Quit
from pdfnav.navigator.controller import Navigator
from pdfnav.navigator.events import (
    Event,
    ExtractionDone,
    KeyPressed,
    MouseAction,
    MouseInput,
    Resized,
    ViewerLaunched,
)
from pdfnav.navigator.model import (
    ExtractionOutcome,
    InputMode,
    NavigatorContext,
    NavigatorState,
    ViewMode,
)
from pdfnav.navigator.reducer import active_page, edit_query, initial_state, reduce
from pdfnav.navigator.view import Frame, Span, Style, render

__all__ = [
    # model
    "ExtractionOutcome", "InputMode", "NavigatorContext", "NavigatorState", "ViewMode",
    # events
    "Event", "ExtractionDone", "KeyPressed", "MouseAction", "MouseInput", "Resized",
    "ViewerLaunched",
    # commands
    "Command", "ExtractSegments", "OpenViewer", "Quit",
    # reducer, controller & view
    "active_page", "edit_query", "initial_state", "reduce", "Navigator",
    "Frame", "Span", "Style", "render",
]
