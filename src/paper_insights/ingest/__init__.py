"""Document ingestion: page extraction and citation-addressable chunking."""
from __future__ import annotations

from .chunking import (
    ChunkingConfig,
    ChunkingConfigError,
    DocumentChunker,
    PageOrderError,
    chunk_document,
    document_text,
)
from .extractors import ExtractionError, PDFExtractor
from .models import DocumentChunk, PageBoundary, PageContent
from .pipeline import IngestOutcome, IngestPipeline, IngestStatistics, compute_checksum

__all__ = [
    "ChunkingConfig",
    "ChunkingConfigError",
    "DocumentChunk",
    "DocumentChunker",
    "ExtractionError",
    "IngestOutcome",
    "IngestPipeline",
    "IngestStatistics",
    "PDFExtractor",
    "PageBoundary",
    "PageContent",
    "PageOrderError",
    "chunk_document",
    "compute_checksum",
    "document_text",
]
