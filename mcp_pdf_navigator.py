#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.10"
# dependencies = ["mcp>=1.2.0", "PyMuPDF>=1.23.0", "anyio>=4.0", "rich>=13.0"]
#
# [project.optional-dependencies]
# dev = ["pytest>=7.0", "pytest-asyncio>=0.21.0"]
# ///
"""
`mcp_pdf_navigator.py` – **Model Context Protocol** server and command line
for navigating PDF files: fuzzy full-text search, printed page labels and
page splitting.

Started without arguments the script serves the tools below over stdio.
With a subcommand it runs as a regular CLI (`pdfnav search book.pdf`).

Tools exposed to LLMs
--------------------
* **`search_pdf_text`** – Fuzzy search the text lines of a PDF, ranked, with a
  0-100 score and the matched character positions.
* **`resolve_pdf_pages`** – Turn a page expression ('ii-iv,7' or '1-3,5') into
  physical page numbers.
* **`get_pdf_page_labels`** – Printed page labels (i, ii, 1, A-3, ...).
* **`get_pdf_page_count`** – Number of pages.
* **`extract_pdf_pages`** – Write a page selection to a new PDF.
* **`split_pdf`** – Cut a PDF at split points, one file per segment.

Page expressions
----------------
Comma-separated single pages and ranges:
- Printed labels (default): 'v', 'ii-iv', 'A-1,A-3'
- Physical pages (raw=true): '1', '1-3,5'
Pages keep the order they were first named in; duplicates are dropped.

Split points
------------
A split point p starts a new segment at page p, so [3, 6] on an 8-page PDF
gives p.1–2, p.3–5 and p.6–8, written as `{name}_p{start}-{end}.pdf`.

Interactive navigator
---------------------
`search FILE [QUERY]` and `split FILE` (no selection flags) open a
terminal navigator with vi-style Normal/Insert modes:
- / type a query · j/k move · enter select · o open viewer · tab switch view
- Split view: h/l page · g/G first/last · x mark split · e extract segment
  · enter extract all segments · mouse wheel and clicks work too

The viewer defaults to sioyek; set PDFNAV_VIEWER to another executable.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP
from rich.console import Console
from rich.progress import track

from pdfnav.config import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_THRESHOLD,
    NavigatorConfig,
    output_dir_for,
)
from pdfnav.document import PdfDocument
from pdfnav.errors import DocumentError, PdfNavError
from pdfnav.labels import read_page_labels
from pdfnav.navigator import NavigatorState, ViewMode
from pdfnav.ranges import parse_page_ranges, resolve_label_ranges
from pdfnav.search import format_result, static_search
from pdfnav.segments import SegmentModel
from pdfnav.split import (
    extract_all_pages,
    extract_segments,
    extract_selection,
    page_filename,
    selection_filename,
)
from pdfnav.text_index import load_lines, require_lines

# Tool names as seen by LLMs
SEARCH_PDF_TEXT_TOOL = "search_pdf_text"
RESOLVE_PDF_PAGES_TOOL = "resolve_pdf_pages"
GET_PDF_PAGE_LABELS_TOOL = "get_pdf_page_labels"
GET_PDF_PAGE_COUNT_TOOL = "get_pdf_page_count"
EXTRACT_PDF_PAGES_TOOL = "extract_pdf_pages"
SPLIT_PDF_TOOL = "split_pdf"

LOG_FORMAT = "%(levelname)s | %(message)s"

# Logger
logger = logging.getLogger(__name__)

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
quiet = False


# ---------------------------------------------------------------------------
# FastMCP server instance
# ---------------------------------------------------------------------------
mcp = FastMCP("pdf-navigator")


def _resolve_pages(document: PdfDocument, pages: str, raw: bool) -> list[int]:
    if raw:
        return parse_page_ranges(pages, document.page_count)
    label_map, _ = read_page_labels(document)
    return resolve_label_ranges(pages, label_map)


# ---------------------------------------------------------------------------
# Tool: search_pdf_text
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Fuzzy search the text of a PDF, line by line.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n"
        "  query (str): Characters to look for, in order (not a regex). Required.\n"
        "  limit (int, optional): Maximum number of results. Default: 20.\n"
        "  threshold (int, optional): Minimum score 0-100. Default: 30.\n\n"
        "Results are ranked best first. matched_indexes are the character\n"
        "offsets of the query characters inside text.\n\n"
        "Returns: { results: [{ page, score, text, matched_indexes }] } or { error: string }"
    )
)
def search_pdf_text(
    file: str,
    query: str,
    limit: int = DEFAULT_MAX_RESULTS,
    threshold: int = DEFAULT_THRESHOLD,
) -> dict[str, Any]:
    """Ranked fuzzy matches over the text lines of a PDF."""
    if not file or not query:
        return {"error": "Both 'file' and 'query' arguments are required"}
    if limit <= 0:
        return {"error": "limit must be positive"}

    try:
        with PdfDocument.open(file) as document:
            lines = require_lines(document)
    except PdfNavError as exc:
        return {"error": str(exc)}

    results = static_search(lines, query, limit, threshold)
    return {
        "file": file,
        "query": query,
        "results": [result.as_dict() for result in results],
    }


# ---------------------------------------------------------------------------
# Tool: resolve_pdf_pages
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Resolve a page expression to physical (1-based) page numbers.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n"
        "  pages (str): Comma-separated pages and ranges. Required.\n"
        "  raw (bool, optional): Treat numbers as physical pages instead of\n"
        "    printed labels. Default: false.\n\n"
        "Examples:\n"
        "  pages='ii-iv' on a book with roman front matter -> [2, 3, 4]\n"
        "  pages='1-3,5', raw=true -> [1, 2, 3, 5]\n\n"
        "Returns: { pages: number[], page_labels: string[] } or { error: string }"
    )
)
def resolve_pdf_pages(file: str, pages: str, raw: bool = False) -> dict[str, Any]:
    """Physical pages for a label or raw-index expression."""
    if not file or not pages:
        return {"error": "Both 'file' and 'pages' arguments are required"}

    try:
        with PdfDocument.open(file) as document:
            resolved = _resolve_pages(document, pages, raw)
            _, labels = read_page_labels(document)
    except PdfNavError as exc:
        return {"error": str(exc)}

    return {"pages": resolved, "page_labels": [labels[page - 1] for page in resolved]}


# ---------------------------------------------------------------------------
# Tool: get_pdf_page_labels
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Get the printed page labels of a PDF file.\n\n"
        "Returns a mapping of page indices (0-based) to their labels.\n"
        "Labels come from the PDF's /PageLabels tree; without one every page\n"
        "is labelled with its 1-based number.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n"
        "  start (int, optional): Start index (0-based) for slicing results. Default: 0.\n"
        "  limit (int, optional): Maximum number of labels to return. Default: all pages.\n\n"
        "Returns: { page_count: number, page_labels: object } or { error: string }\n"
        "  where page_labels is a mapping like: {'0': 'i', '1': 'ii', '2': 'iii', '3': '1', ...}"
    )
)
def get_pdf_page_labels(
    file: str, start: int | None = None, limit: int | None = None
) -> dict[str, Any]:
    """Get all page labels from a PDF file."""
    if not file:
        return {"error": "'file' argument is required"}

    # Validate start and limit
    if start is not None and start < 0:
        return {"error": "start must be non-negative"}
    if limit is not None and limit <= 0:
        return {"error": "limit must be positive"}

    try:
        with PdfDocument.open(file) as document:
            page_count = document.page_count
            _, labels = read_page_labels(document)
    except PdfNavError as exc:
        return {"error": str(exc)}

    start_idx = start if start is not None else 0
    end_idx = page_count if limit is None else min(start_idx + limit, page_count)
    page_label_map = {str(i): labels[i] for i in range(start_idx, end_idx)}
    return {"page_count": page_count, "page_labels": page_label_map}


# ---------------------------------------------------------------------------
# Tool: get_pdf_page_count
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Get the total number of pages in a PDF file.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n\n"
        "Returns: { page_count: number } or { error: string }"
    )
)
def get_pdf_page_count(file: str) -> dict[str, Any]:
    """Get the total number of pages in a PDF file."""
    if not file:
        return {"error": "'file' argument is required"}

    try:
        with PdfDocument.open(file) as document:
            return {"page_count": document.page_count}
    except PdfNavError as exc:
        return {"error": str(exc)}


# ---------------------------------------------------------------------------
# Tool: extract_pdf_pages
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Write selected pages of a PDF to a new PDF file.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n"
        "  pages (str): Comma-separated pages and ranges. Required.\n"
        "  output (str, optional): Output .pdf file or directory.\n"
        "    Default: '{name}_pages_{pages}.pdf' in the current directory.\n"
        "  raw (bool, optional): Treat numbers as physical pages instead of\n"
        "    printed labels. Default: false.\n\n"
        "Pages are written in the order given.\n\n"
        "Returns: { output: string, pages: number[] } or { error: string }"
    )
)
def extract_pdf_pages(
    file: str, pages: str, output: str | None = None, raw: bool = False
) -> dict[str, Any]:
    """Extract a page selection into its own PDF."""
    if not file or not pages:
        return {"error": "Both 'file' and 'pages' arguments are required"}

    try:
        with PdfDocument.open(file) as document:
            resolved = _resolve_pages(document, pages, raw)
            out_file = selection_filename(document.base_name, pages, output)
            written = extract_selection(document, resolved, out_file)
    except PdfNavError as exc:
        return {"error": str(exc)}

    return {"output": str(written), "pages": resolved}


# ---------------------------------------------------------------------------
# Tool: split_pdf
# ---------------------------------------------------------------------------
@mcp.tool(
    description=(
        "Split a PDF into consecutive segments, one output file each.\n\n"
        "Args:\n"
        "  file (str): Path to PDF file. Required.\n"
        "  split_points (list[int]): Physical pages that start a new segment,\n"
        "    each between 2 and the page count. Required.\n"
        "  output_dir (str, optional): Directory for the files (created if\n"
        "    missing). Default: current directory.\n\n"
        "Example: split_points=[3, 6] on an 8-page PDF writes\n"
        "  book_p1-2.pdf, book_p3-5.pdf, book_p6-8.pdf\n\n"
        "Returns: { segments: [[start, end]], files: string[] } or { error: string }"
    )
)
def split_pdf(
    file: str, split_points: list[int], output_dir: str | None = None
) -> dict[str, Any]:
    """Cut a PDF at the given split points."""
    if not file or not split_points:
        return {"error": "Both 'file' and 'split_points' arguments are required"}

    try:
        with PdfDocument.open(file) as document:
            page_count = document.page_count
            invalid = [p for p in split_points if not 2 <= p <= page_count]
            if invalid:
                return {
                    "error": f"split points must be between 2 and {page_count}: {invalid}"
                }
            model = SegmentModel(page_count, frozenset(split_points))
            segments = model.build_segments()
            files = extract_segments(document, segments, output_dir_for(output_dir))
    except PdfNavError as exc:
        return {"error": str(exc)}

    return {
        "segments": [[segment.start, segment.end] for segment in segments],
        "files": [str(path) for path in files],
    }


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def _success(msg: str) -> None:
    if not quiet:
        console.print(f"[green]✓[/green] {msg}")


def _info(msg: str) -> None:
    if not quiet:
        console.print(f"[cyan]→[/cyan] {msg}")


def _warning(msg: str) -> None:
    if not quiet:
        console.print(f"[yellow]⚠[/yellow] {msg}")


def _error(msg: str) -> None:
    err_console.print(f"[red]✗[/red] {msg}")


def format_file_size(size: int) -> str:
    """Binary units, one decimal: 532 B, 1.5 KB, 2.0 MB."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def _report_session(state: NavigatorState) -> int:
    """Print what an interactive session ended with."""
    if state.selected is not None:
        print(f"p.{state.selected.page}: {state.selected.text}")
    outcome = state.outcome
    if outcome is None:
        return 0
    if outcome.ok:
        _success(f"created {outcome.count} file(s)")
        return 0
    _error(f"error: {outcome.error}")
    return 1


def _run_interactive(
    document: PdfDocument, lines: list, config: NavigatorConfig
) -> NavigatorState:
    # curses is only needed (and only importable everywhere) for the TUI
    from pdfnav.tui import run_navigator

    return run_navigator(document, lines, config)


def _cmd_search(ns: argparse.Namespace) -> int:
    query = ns.query or ""
    with PdfDocument.open(ns.file) as document:
        _info(f"Loading text from {ns.file}...")
        lines = require_lines(document)
        config = NavigatorConfig(
            output_dir=output_dir_for(ns.output),
            max_results=ns.max_results,
            threshold=ns.threshold,
            initial_query=query,
            start_view=ViewMode.SEARCH,
        )

        if ns.no_interactive or ns.json:
            results = static_search(lines, query, config.max_results, config.threshold)
            if ns.json:
                payload = {"query": query, "results": [r.as_dict() for r in results]}
                print(json.dumps(payload, indent=2, ensure_ascii=False))
                return 0
            for result in results:
                console.print(format_result(result), soft_wrap=True)
            if not results:
                _warning(f'No matches for "{query}"')
            return 0

        state = _run_interactive(document, lines, config)
    return _report_session(state)


def _cmd_split(ns: argparse.Namespace) -> int:
    with PdfDocument.open(ns.file) as document:
        if ns.pages and ns.pdf_pages:
            raise PdfNavError("specify either -p/--pages or -P/--pdf-pages, not both")
        if (ns.pages or ns.pdf_pages) and ns.extract_all:
            raise PdfNavError(
                "cannot use page selection flags (-p/--pages or -P/--pdf-pages) together with -e"
            )

        # No page selection: open the navigator in Split view
        if not (ns.pages or ns.pdf_pages or ns.extract_all or ns.dry_run):
            _info("Loading text for search…")
            config = NavigatorConfig(
                output_dir=output_dir_for(ns.output), start_view=ViewMode.SPLIT
            )
            state = _run_interactive(document, load_lines(document), config)
            return _report_session(state)

        _info(f"Input: {document.path.name} ({document.page_count} pages)")
        if ns.dry_run:
            _warning("Dry run — no files will be written")
        if ns.extract_all:
            return _extract_all(document, ns)
        return _extract_ranges(document, ns)


def _extract_all(document: PdfDocument, ns: argparse.Namespace) -> int:
    out_dir = Path(ns.output or ".")
    if out_dir.suffix.lower() == ".pdf":
        raise DocumentError("output must be a directory when using -e, not a file")
    page_count = document.page_count

    if ns.dry_run:
        _info(f"Would extract {page_count} pages to {out_dir}/")
        if not quiet:
            for page in range(1, page_count + 1):
                name = page_filename(document.base_name, page, out_dir).name
                console.print(f"  [cyan]→[/cyan] {name}")
        return 0

    _info(f"Extracting {page_count} pages to {out_dir}/...")
    progress = None
    if not quiet:
        progress = partial(
            track, description="Extracting", total=page_count, console=console
        )
    extract_all_pages(document, out_dir, progress)
    _success(f"Extracted {page_count} pages to {out_dir}/")
    return 0


def _extract_ranges(document: PdfDocument, ns: argparse.Namespace) -> int:
    expr = ns.pdf_pages or ns.pages or ""
    pages = _resolve_pages(document, expr, raw=bool(ns.pdf_pages))
    out_file = selection_filename(document.base_name, expr, ns.output)

    _info(f"Extracting {len(pages)} pages (PDF pages {pages})")
    if ns.dry_run:
        _info(f"Would create: {out_file}")
        return 0

    extract_selection(document, pages, out_file)
    _success(f"Created: {out_file} ({format_file_size(out_file.stat().st_size)})")
    return 0


def _configure_logging(verbose: bool, log_file: str | None) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        filename=log_file,
        force=True,
    )


def _cli(argv: list[str] | None = None) -> int:
    global quiet

    parser = argparse.ArgumentParser(
        prog="pdfnav",
        description="Fuzzy search, page labels and interactive splitting for PDF files.",
        epilog="Run without arguments to start the MCP server on stdio.",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress non-essential output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file", help="Write log records to this file instead of stderr"
    )

    sub = parser.add_subparsers(dest="cmd", required=False)

    # search subcommand
    p_search = sub.add_parser("search", help="Fuzzy search text across a PDF")
    p_search.add_argument("file", help="PDF file path")
    p_search.add_argument("query", nargs="?", default="", help="Initial query")
    p_search.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=DEFAULT_MAX_RESULTS,
        help="Max results (non-interactive mode)",
    )
    p_search.add_argument(
        "-t",
        "--threshold",
        type=int,
        default=DEFAULT_THRESHOLD,
        help="Min match score 0-100 (non-interactive)",
    )
    p_search.add_argument(
        "--no-interactive",
        action="store_true",
        help="Print results and exit without the navigator",
    )
    p_search.add_argument(
        "--json", action="store_true", help="Print results as JSON (implies --no-interactive)"
    )
    p_search.add_argument(
        "-o", "--output", help="Output directory for segments split from the navigator"
    )

    # split subcommand
    p_split = sub.add_parser("split", help="Extract pages or split a PDF")
    p_split.add_argument("file", help="PDF file path")
    p_split.add_argument(
        "-p", "--pages", help="Real (printed) page ranges to extract (e.g., ii-iv,1-5)"
    )
    p_split.add_argument(
        "-P", "--pdf-pages", help="PDF page ranges to extract by raw index (1-based)"
    )
    p_split.add_argument(
        "-e",
        "--extract-all",
        action="store_true",
        help="Extract each page to a separate file",
    )
    p_split.add_argument("-o", "--output", help="Output file (.pdf) or directory")
    p_split.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Preview what would be extracted without writing files",
    )

    # page-labels subcommand
    p_labels = sub.add_parser("page-labels", help="Get all page labels from PDF")
    p_labels.add_argument("file", help="PDF file path")
    p_labels.add_argument("--start", type=int, help="Start index (0-based)")
    p_labels.add_argument("--limit", type=int, help="Maximum number of labels")

    # page-count subcommand
    p_count = sub.add_parser("page-count", help="Get total page count from PDF")
    p_count.add_argument("file", help="PDF file path")

    ns = parser.parse_args(argv)
    quiet = ns.quiet
    _configure_logging(ns.verbose, ns.log_file)

    if not ns.cmd:
        parser.print_help()
        return 0

    if ns.cmd in ("page-labels", "page-count"):
        if ns.cmd == "page-labels":
            res = get_pdf_page_labels(ns.file, ns.start, ns.limit)
        else:
            res = get_pdf_page_count(ns.file)
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return 1 if "error" in res else 0

    try:
        if ns.cmd == "search":
            return _cmd_search(ns)
        return _cmd_split(ns)
    except PdfNavError as exc:
        _error(str(exc))
        return 1


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main() -> None:
    if len(sys.argv) > 1:
        sys.exit(_cli())
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        mcp.run()


if __name__ == "__main__":
    main()
