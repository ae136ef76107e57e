from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from pdfnav.fuzzy import Match
from pdfnav.segments import SegmentModel
from pdfnav.text_index import Line


class InputMode(Enum):
    NORMAL = auto()
    INSERT = auto()


class ViewMode(Enum):
    SEARCH = auto()
    SPLIT = auto()


@dataclass(frozen=True)
class ExtractionOutcome:
    """How the terminal extraction of a session ended."""

    count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class NavigatorContext:
    """Per-session data the reducer reads but never changes."""

    filename: Path
    base_name: str
    page_count: int
    lines: tuple[Line, ...] = ()
    texts: tuple[str, ...] = ()
    output_dir: Path | None = None

    @classmethod
    def create(
        cls,
        filename: str | Path,
        page_count: int,
        lines: list[Line] | tuple[Line, ...] = (),
        output_dir: Path | None = None,
    ) -> NavigatorContext:
        path = Path(filename)
        return cls(
            filename=path,
            base_name=path.stem,
            page_count=page_count,
            lines=tuple(lines),
            texts=tuple(line.text for line in lines),
            output_dir=output_dir,
        )


@dataclass(frozen=True)
class NavigatorState:
    segments: SegmentModel
    input_mode: InputMode = InputMode.NORMAL
    view: ViewMode = ViewMode.SEARCH
    busy: bool = False
    cursor: int = 0
    offset: int = 0
    current_page: int = 1
    matches: tuple[Match, ...] = ()
    query: str = ""
    query_cursor: int = 0
    status: str = ""
    width: int = 0
    height: int = 0
    selected: Line | None = None
    outcome: ExtractionOutcome | None = None
    finished: bool = False

    @property
    def split_points(self) -> frozenset[int]:
        return self.segments.split_points

    @property
    def insert_mode(self) -> bool:
        return self.input_mode is InputMode.INSERT
