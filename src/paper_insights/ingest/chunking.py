"""Chunking utilities for breaking page text into citation-addressable units."""
from __future__ import annotations

import bisect
import logging
import time
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from paper_insights.config import (
    DEFAULT_CHUNK_CHARS,
    DEFAULT_OVERLAP_CHARS,
    DEFAULT_PHRASE_MAX_CHARS,
    DEFAULT_PHRASE_MAX_WORDS,
    Settings,
)
from paper_insights.telemetry import emit_chunking_event

from .models import DocumentChunk, PageBoundary, PageContent

LOGGER = logging.getLogger(__name__)

PAGE_SEPARATOR = " "


class ChunkingConfigError(ValueError):
    """Raised when chunking parameters cannot produce advancing windows."""


class PageOrderError(ValueError):
    """Raised when page numbers are not positive and strictly increasing."""


@dataclass(slots=True, frozen=True)
class ChunkingConfig:
    chunk_chars: int = DEFAULT_CHUNK_CHARS
    overlap_chars: int = DEFAULT_OVERLAP_CHARS
    phrase_max_words: int = DEFAULT_PHRASE_MAX_WORDS
    phrase_max_chars: int = DEFAULT_PHRASE_MAX_CHARS

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChunkingConfig":
        """Build a config from ``settings``, reading the environment when omitted."""

        settings = settings or Settings.from_env()
        return cls(
            chunk_chars=settings.chunk_chars,
            overlap_chars=settings.overlap_chars,
            phrase_max_words=settings.phrase_max_words,
            phrase_max_chars=settings.phrase_max_chars,
        )

    @property
    def stride(self) -> int:
        return self.chunk_chars - self.overlap_chars

    def validate(self) -> None:
        if self.chunk_chars <= 0:
            raise ChunkingConfigError("chunk_chars must be a positive integer")
        if self.overlap_chars < 0:
            raise ChunkingConfigError("overlap_chars must be a non-negative integer")
        if self.overlap_chars >= self.chunk_chars:
            raise ChunkingConfigError(
                f"overlap_chars ({self.overlap_chars}) must be less than chunk_chars ({self.chunk_chars})"
            )
        if self.phrase_max_words <= 0:
            raise ChunkingConfigError("phrase_max_words must be a positive integer")
        if self.phrase_max_chars <= 0:
            raise ChunkingConfigError("phrase_max_chars must be a positive integer")


def build_page_index(pages: Iterable[PageContent]) -> Tuple[str, List[PageBoundary]]:
    """Concatenate page texts and record where each page starts.

    Non-empty pages contribute their text followed by a single separator that
    is counted towards that page. Empty pages keep a zero-width boundary entry.
    """

    parts: List[str] = []
    boundaries: List[PageBoundary] = []
    offset = 0
    previous: Optional[int] = None
    for page in pages:
        if page.page_number <= 0:
            raise PageOrderError(f"page numbers must be positive, got {page.page_number}")
        if previous is not None and page.page_number <= previous:
            raise PageOrderError(
                f"page numbers must be strictly increasing, got {page.page_number} after {previous}"
            )
        previous = page.page_number

        boundaries.append(PageBoundary(page_number=page.page_number, start_offset=offset))
        if page.text:
            parts.append(page.text)
            parts.append(PAGE_SEPARATOR)
            offset += len(page.text) + len(PAGE_SEPARATOR)
    return "".join(parts), boundaries


def document_text(pages: Iterable[PageContent]) -> str:
    """Return the concatenated text that chunk offsets index into."""

    text, _ = build_page_index(pages)
    return text


def page_at(boundaries: Sequence[PageBoundary], offset: int, starts: Optional[Sequence[int]] = None) -> int:
    """Return the page number owning ``offset`` (last boundary starting at or before it)."""

    if starts is None:
        starts = [boundary.start_offset for boundary in boundaries]
    position = bisect.bisect_right(starts, offset) - 1
    return boundaries[max(position, 0)].page_number


def make_phrase(content: str, max_words: int = DEFAULT_PHRASE_MAX_WORDS, max_chars: int = DEFAULT_PHRASE_MAX_CHARS) -> str:
    """Build the short leading excerpt used to jump to a citation."""

    phrase = " ".join(content.split()[:max_words])
    if len(phrase) <= max_chars:
        return phrase
    cut = phrase.rfind(" ", 0, max_chars + 1)
    if cut > 0:
        return phrase[:cut]
    # A single oversized word: never separate a base character from its combining marks.
    cut = max_chars
    while cut > 0 and unicodedata.combining(phrase[cut]):
        cut -= 1
    return phrase[:cut] if cut > 0 else phrase[:max_chars]


class DocumentChunker:
    """Split ordered page text into fixed-size overlapping windows."""

    def __init__(self, config: Optional[ChunkingConfig] = None) -> None:
        self.config = config or ChunkingConfig()
        self.config.validate()

    def chunk_pages(self, pages: Iterable[PageContent]) -> List[DocumentChunk]:
        started = time.perf_counter()
        page_list = list(pages)
        text, boundaries = build_page_index(page_list)
        starts = [boundary.start_offset for boundary in boundaries]
        text_length = len(text)
        chunk_chars = self.config.chunk_chars
        stride = self.config.stride

        chunks: List[DocumentChunk] = []
        start = 0
        while start < text_length:
            end = min(start + chunk_chars, text_length)
            content = text[start:end]
            chunk = DocumentChunk(
                content=content,
                phrase=make_phrase(content, self.config.phrase_max_words, self.config.phrase_max_chars),
                page_start=page_at(boundaries, start, starts),
                page_end=page_at(boundaries, end - 1, starts),
                char_start=start,
                char_end=end,
            )
            LOGGER.debug(
                "Chunk %s pages %s-%s offsets %s-%s",
                len(chunks),
                chunk.page_start,
                chunk.page_end,
                chunk.char_start,
                chunk.char_end,
            )
            chunks.append(chunk)
            if end >= text_length:
                break
            start += stride

        emit_chunking_event(
            pages=len(page_list),
            total_chars=text_length,
            chunks=len(chunks),
            chunk_chars=chunk_chars,
            overlap_chars=self.config.overlap_chars,
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return chunks


def chunk_document(pages: Iterable[PageContent], config: Optional[ChunkingConfig] = None) -> List[DocumentChunk]:
    """Split extracted pages into overlapping, offset-tagged chunks."""

    return DocumentChunker(config).chunk_pages(pages)


__all__ = [
    "ChunkingConfig",
    "ChunkingConfigError",
    "DocumentChunker",
    "PAGE_SEPARATOR",
    "PageOrderError",
    "build_page_index",
    "chunk_document",
    "document_text",
    "make_phrase",
    "page_at",
]
