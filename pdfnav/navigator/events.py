"""Inputs to the navigator reducer; exactly one is processed at a time."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Event:
    """Marker base class for all navigator events."""


@dataclass(frozen=True)
class KeyPressed(Event):
    """A normalised key: a printable character, or a name such as ``"ctrl+o"``."""

    key: str


class MouseAction(Enum):
    WHEEL_UP = auto()
    WHEEL_DOWN = auto()
    LEFT_PRESS = auto()


@dataclass(frozen=True)
class MouseInput(Event):
    action: MouseAction
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class Resized(Event):
    width: int
    height: int


@dataclass(frozen=True)
class ExtractionDone(Event):
    """Completion of a background extraction: a file count or the first error."""

    count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ViewerLaunched(Event):
    error: str | None = None
