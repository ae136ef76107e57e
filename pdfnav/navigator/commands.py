"""Effects requested by the reducer and carried out by the executor."""

from __future__ import annotations

from dataclasses import dataclass

from pdfnav.segments import Segment


class Command:
    """Marker base class for all commands."""


@dataclass(frozen=True)
class Quit(Command):
    """End the interactive session."""


@dataclass(frozen=True)
class ExtractSegments(Command):
    segments: tuple[Segment, ...]


@dataclass(frozen=True)
class OpenViewer(Command):
    page: int
