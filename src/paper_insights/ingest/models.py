"""Data models used by the ingestion pipeline."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class PageContent:
    """Represents text extracted from a page in the source document."""

    page_number: int
    text: str


@dataclass(slots=True, frozen=True)
class PageBoundary:
    """Offset at which a page starts inside the concatenated document text."""

    page_number: int
    start_offset: int


@dataclass(slots=True, frozen=True)
class DocumentChunk:
    """Overlapping window of document text with page and offset provenance.

    ``char_start``/``char_end`` index code points of the concatenated
    document text, so ``char_end - char_start == len(content)`` always holds.
    """

    content: str
    phrase: str
    page_start: int
    page_end: int
    char_start: int
    char_end: int
