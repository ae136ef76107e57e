"""Non-interactive search over a text corpus."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from pdfnav.errors import PdfNavError
from pdfnav.fuzzy import find, highlight_spans, score_percent
from pdfnav.text_index import Line, line_texts


@dataclass(frozen=True)
class SearchResult:
    page: int
    score: int  # percent
    text: str
    matched_indexes: tuple[int, ...]

    def as_dict(self) -> dict:
        return {
            "page": self.page,
            "score": self.score,
            "text": self.text,
            "matched_indexes": list(self.matched_indexes),
        }


def static_search(
    lines: list[Line], query: str, max_results: int, threshold: int
) -> list[SearchResult]:
    """Ranked results scoring at least ``threshold``, at most ``max_results`` of them."""
    if not query:
        raise PdfNavError("provide a query or remove --no-interactive")
    results = []
    for match in find(query, line_texts(lines)):
        score = score_percent(match.score, len(query))
        if score < threshold:
            continue
        line = lines[match.index]
        results.append(SearchResult(line.page, score, line.text, match.matched_indexes))
        if len(results) >= max_results:
            break
    return results


def format_result(result: SearchResult) -> Text:
    """``p.12   [ 87%]  highlighted text`` as rich text."""
    out = Text("  ")
    out.append(f"p.{result.page:<4d}", style="cyan")
    out.append(" ")
    out.append(f"[{result.score:3d}%]", style="green" if result.score >= 60 else "yellow")
    out.append("  ")
    for chunk, matched in highlight_spans(result.text, result.matched_indexes):
        out.append(chunk, style="bold bright_yellow" if matched else None)
    return out
