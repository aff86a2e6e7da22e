"""Persistence interface for chunks and summaries, with an in-memory store."""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from paper_insights.ingest.models import DocumentChunk

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class StoredChunk:
    """A chunk after persistence assigned it an identifier and owning document."""

    id: int
    document_id: int
    content: str
    phrase: str
    page_start: int
    page_end: int
    char_start: int
    char_end: int


@dataclass(slots=True)
class DocumentRecord:
    document_id: int
    file_hash: Optional[str] = None
    ai_summary: Optional[str] = None
    chunks: List[StoredChunk] = field(default_factory=list)


class DocumentStore(Protocol):
    """Storage operations the insight service relies on."""

    def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        ...

    def replace_chunks(self, document_id: int, chunks: Sequence[DocumentChunk]) -> List[StoredChunk]:
        ...

    def list_chunks(self, document_id: int) -> List[StoredChunk]:
        ...

    def save_summary(self, document_id: int, summary: str, *, file_hash: Optional[str] = None) -> None:
        ...


class InMemoryDocumentStore:
    """Keep documents, chunks and summaries in process memory.

    Chunk identifiers are allocated from one counter shared by all documents;
    ``first_chunk_id`` lets callers start above the 64-bit range.
    """

    def __init__(self, *, first_chunk_id: int = 1) -> None:
        self._documents: Dict[int, DocumentRecord] = {}
        self._ids = itertools.count(first_chunk_id)
        self._lock = threading.Lock()

    def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        return self._documents.get(document_id)

    def _ensure_document(self, document_id: int) -> DocumentRecord:
        record = self._documents.get(document_id)
        if record is None:
            record = self._documents[document_id] = DocumentRecord(document_id=document_id)
        return record

    def replace_chunks(self, document_id: int, chunks: Sequence[DocumentChunk]) -> List[StoredChunk]:
        with self._lock:
            record = self._ensure_document(document_id)
            stored = [
                StoredChunk(
                    id=next(self._ids),
                    document_id=document_id,
                    content=chunk.content,
                    phrase=chunk.phrase,
                    page_start=chunk.page_start,
                    page_end=chunk.page_end,
                    char_start=chunk.char_start,
                    char_end=chunk.char_end,
                )
                for chunk in chunks
            ]
            removed = len(record.chunks)
            record.chunks = stored
        LOGGER.debug(
            "Replaced %s chunks with %s for document %s", removed, len(stored), document_id
        )
        return list(stored)

    def list_chunks(self, document_id: int) -> List[StoredChunk]:
        record = self._documents.get(document_id)
        if record is None:
            return []
        return sorted(record.chunks, key=lambda chunk: chunk.id)

    def save_summary(self, document_id: int, summary: str, *, file_hash: Optional[str] = None) -> None:
        with self._lock:
            record = self._ensure_document(document_id)
            record.ai_summary = summary
            if file_hash is not None:
                record.file_hash = file_hash


__all__ = ["DocumentRecord", "DocumentStore", "InMemoryDocumentStore", "StoredChunk"]
