"""High level ingestion pipeline entry point."""
from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from .chunking import ChunkingConfig, DocumentChunker
from .extractors import PDFExtractor
from .models import DocumentChunk, PageContent

LOGGER = logging.getLogger(__name__)


def compute_checksum(data: bytes) -> str:
    """Return the hex SHA-256 digest used to detect unchanged uploads."""

    return hashlib.sha256(data).hexdigest()


@dataclass(slots=True)
class IngestStatistics:
    page_count: int
    chunk_count: int
    total_chars: int
    duration_seconds: float


@dataclass(slots=True)
class IngestOutcome:
    """Pages, chunks and checksum produced for one document."""

    file_name: str
    checksum: str
    pages: List[PageContent]
    chunks: List[DocumentChunk]
    statistics: IngestStatistics


class IngestPipeline:
    """Pipeline orchestrating PDF extraction and chunking."""

    def __init__(
        self,
        config: Optional[ChunkingConfig] = None,
        *,
        extractor: Optional[PDFExtractor] = None,
        chunker: Optional[DocumentChunker] = None,
    ) -> None:
        self.extractor = extractor or PDFExtractor()
        self.chunker = chunker or DocumentChunker(config or ChunkingConfig.from_settings())
        self.last_statistics: Optional[IngestStatistics] = None

    def process(self, file_bytes: bytes, file_name: str) -> IngestOutcome:
        """Extract pages from ``file_bytes`` and split them into chunks."""

        started = time.perf_counter()
        checksum = compute_checksum(file_bytes)
        LOGGER.info("Extracting text from %s (%s bytes)", file_name, len(file_bytes))

        pages = self.extractor.extract(file_bytes)
        LOGGER.info("Extracted %s pages from %s", len(pages), file_name)

        chunks = self.chunker.chunk_pages(pages)
        LOGGER.info("Generated %s chunks for %s", len(chunks), file_name)

        statistics = IngestStatistics(
            page_count=len(pages),
            chunk_count=len(chunks),
            total_chars=chunks[-1].char_end if chunks else 0,
            duration_seconds=time.perf_counter() - started,
        )
        self.last_statistics = statistics
        return IngestOutcome(
            file_name=file_name,
            checksum=checksum,
            pages=pages,
            chunks=chunks,
            statistics=statistics,
        )
