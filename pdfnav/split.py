"""Writing page selections and segments to new PDF files."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from pdfnav.document import PdfDocument
from pdfnav.errors import DocumentError
from pdfnav.ranges import sanitize_range
from pdfnav.segments import Segment, ensure_output_dir, segment_filename

logger = logging.getLogger(__name__)


def extract_segments(
    document: PdfDocument,
    segments: Iterable[Segment],
    output_dir: Path | None = None,
    base_name: str | None = None,
) -> list[Path]:
    """Write one file per segment; stops at the first failure.

    Raises:
        DocumentError: If the output directory or a file cannot be written.
    """
    base = base_name or document.base_name
    try:
        ensure_output_dir(output_dir)
    except OSError as exc:
        raise DocumentError(f"failed to create output directory: {exc}") from exc

    written = []
    for segment in segments:
        out_file = segment_filename(base, segment, output_dir)
        logger.info("Extracting %s to %s", segment, out_file)
        written.append(document.collect_pages(segment.pages(), out_file))
    return written


def selection_filename(
    base_name: str, expr: str, output: str | None = None
) -> Path:
    """Output path for ``split -p/-P``.

    ``output`` may name a ``.pdf`` file (used as is) or a directory.
    """
    default_name = f"{base_name}_pages_{sanitize_range(expr)}.pdf"
    if not output:
        return Path(default_name)
    if output.lower().endswith(".pdf"):
        return Path(output)
    return Path(output) / default_name


def extract_selection(
    document: PdfDocument, pages: list[int], out_file: Path
) -> Path:
    try:
        ensure_output_dir(out_file.parent if str(out_file.parent) != "." else None)
    except OSError as exc:
        raise DocumentError(f"failed to create output directory: {exc}") from exc
    return document.collect_pages(pages, out_file)


def page_filename(base_name: str, page: int, output_dir: Path) -> Path:
    return output_dir / f"{base_name}_page_{page:03d}.pdf"


def extract_all_pages(
    document: PdfDocument,
    output_dir: Path,
    progress: Callable[[Iterable[int]], Iterable[int]] | None = None,
) -> list[Path]:
    """Write every page to its own ``{base}_page_NNN.pdf``.

    Args:
        document: Source document.
        output_dir: Target directory, created if missing.
        progress: Optional wrapper around the page iterator (e.g.
            ``rich.progress.track``).
    """
    if output_dir.suffix.lower() == ".pdf":
        raise DocumentError("output must be a directory when extracting all pages, not a file")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DocumentError(f"failed to create output directory: {exc}") from exc

    pages: Iterable[int] = range(1, document.page_count + 1)
    if progress is not None:
        pages = progress(pages)
    written = []
    for page in pages:
        out_file = page_filename(document.base_name, page, output_dir)
        try:
            written.append(document.collect_pages([page], out_file))
        except DocumentError as exc:
            raise DocumentError(f"failed to extract page {page}: {exc}") from exc
    return written
