"""Split points and the page segments they carve a document into."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple


class Segment(NamedTuple):
    """Inclusive range of physical pages destined for one output file."""

    start: int
    end: int

    def pages(self) -> range:
        return range(self.start, self.end + 1)

    def __str__(self) -> str:
        return f"p.{self.start}–{self.end}"


@dataclass(frozen=True)
class SegmentModel:
    """Immutable set of split points over a ``page_count``-page document.

    A split point ``p`` starts a new segment at page ``p``; page 1 can never be
    one. ``toggle`` returns a new model, so navigator states can share models.
    """

    page_count: int
    split_points: frozenset[int] = field(default_factory=frozenset)

    def toggle(self, page: int) -> SegmentModel:
        if page <= 1 or page > self.page_count:
            return self
        return SegmentModel(self.page_count, self.split_points ^ {page})

    def is_split(self, page: int) -> bool:
        return page in self.split_points

    def sorted_splits(self) -> list[int]:
        return sorted(self.split_points)

    def build_segments(self) -> list[Segment]:
        segments = []
        start = 1
        for split in self.sorted_splits():
            segments.append(Segment(start, split - 1))
            start = split
        segments.append(Segment(start, self.page_count))
        return segments

    def current_segment(self, page: int) -> Segment:
        for segment in self.build_segments():
            if segment.start <= page <= segment.end:
                return segment
        return Segment(1, self.page_count)


def segment_filename(base_name: str, segment: Segment, output_dir: Path | None = None) -> Path:
    """``{base}_p{start}-{end}.pdf``, inside ``output_dir`` when one is configured."""
    name = f"{base_name}_p{segment.start}-{segment.end}.pdf"
    return Path(output_dir) / name if output_dir else Path(name)


def ensure_output_dir(output_dir: Path | None) -> None:
    if output_dir:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
