"""Exception types shared by the navigator, the CLI and the MCP tools."""

from __future__ import annotations


class PdfNavError(Exception):
    """Base class for every error pdfnav reports to the user."""


class DocumentError(PdfNavError):
    """Raised when the document service cannot open, read or write a PDF."""


class NoExtractableTextError(PdfNavError):
    """Raised when a PDF yields no searchable text at all."""


class PageRangeError(PdfNavError, ValueError):
    """Raised for malformed, out-of-bounds or unknown page selections."""
