"""Fuzzy search, page-label resolution and interactive splitting for PDF files."""

__version__ = "0.1.0"
