"""Document insight workflow: ingest, summary regeneration and summary lookup."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from paper_insights.ingest.pipeline import IngestPipeline, compute_checksum
from paper_insights.logging_config import AUDIT_LOGGER_NAME
from paper_insights.storage import DocumentStore
from paper_insights.summary.models import AiInsightResult
from paper_insights.summary.resolver import SummaryResolver
from paper_insights.telemetry import emit_exception, emit_ingest_event, traced_duration

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)


class InsightServiceError(RuntimeError):
    """Base exception for document insight workflows."""


class NoExtractableTextError(InsightServiceError):
    """Raised when a document yields no text to chunk."""


class NoChunksError(InsightServiceError):
    """Raised when a summary is requested for a document without stored chunks."""


@dataclass(slots=True)
class IngestReport:
    """Structured result returned from :meth:`DocumentInsightService.ingest`."""

    document_id: int
    checksum: str
    skipped: bool
    chunks_processed: int
    summary_generated: bool
    duration_seconds: float


class DocumentInsightService:
    """Orchestrates extraction, chunk persistence and summary generation."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        pipeline: IngestPipeline | None = None,
        resolver: SummaryResolver | None = None,
    ) -> None:
        self.store = store
        self.pipeline = pipeline or IngestPipeline()
        self.resolver = resolver or SummaryResolver()

    def ingest(
        self,
        document_id: int,
        file_bytes: bytes,
        file_name: str,
        *,
        question: Optional[str] = None,
    ) -> IngestReport:
        """Chunk a document and regenerate its summary unless the file is unchanged."""

        started = time.perf_counter()
        checksum = compute_checksum(file_bytes)
        emit_ingest_event(
            "ingest.file.start",
            document_id=document_id,
            file_name=file_name,
            size_bytes=len(file_bytes),
            checksum=checksum,
        )

        record = self.store.get_document(document_id)
        if record is not None and record.file_hash == checksum and record.ai_summary:
            LOGGER.info("Document %s unchanged; skipping AI processing", document_id)
            duration = time.perf_counter() - started
            emit_ingest_event(
                "ingest.file.complete",
                document_id=document_id,
                file_name=file_name,
                checksum=checksum,
                chunks=0,
                duration_ms=duration * 1000.0,
                skipped=True,
            )
            return IngestReport(
                document_id=document_id,
                checksum=checksum,
                skipped=True,
                chunks_processed=0,
                summary_generated=False,
                duration_seconds=duration,
            )

        try:
            outcome = self.pipeline.process(file_bytes, file_name)
        except Exception as error:
            emit_exception(module=f"{__name__}.pipeline", error=error, document_id=document_id)
            raise

        if not outcome.pages:
            raise NoExtractableTextError(f"No text extracted from {file_name}")

        stored_chunks = self.store.replace_chunks(document_id, outcome.chunks)
        summary = self.resolver.generate(stored_chunks, question)
        self.store.save_summary(document_id, summary, file_hash=checksum)

        duration = time.perf_counter() - started
        emit_ingest_event(
            "ingest.file.complete",
            document_id=document_id,
            file_name=file_name,
            size_bytes=len(file_bytes),
            checksum=checksum,
            pages=outcome.statistics.page_count,
            chunks=len(stored_chunks),
            duration_ms=duration * 1000.0,
            skipped=False,
        )
        AUDIT_LOGGER.info(
            {
                "event": "ingest",
                "document_id": document_id,
                "file_name": file_name,
                "chunk_count": len(stored_chunks),
            }
        )
        return IngestReport(
            document_id=document_id,
            checksum=checksum,
            skipped=False,
            chunks_processed=len(stored_chunks),
            summary_generated=True,
            duration_seconds=duration,
        )

    def regenerate_summary(self, document_id: int, question: Optional[str] = None) -> str:
        """Rebuild the summary from stored chunks, superseding the previous one."""

        with traced_duration("summary.regenerate", document_id=document_id):
            chunks = self.store.list_chunks(document_id)
            if not chunks:
                raise NoChunksError(f"No chunks found for document {document_id}")

            summary = self.resolver.generate(chunks, question)
            self.store.save_summary(document_id, summary)
        AUDIT_LOGGER.info(
            {
                "event": "regenerate_summary",
                "document_id": document_id,
                "chunk_count": len(chunks),
            }
        )
        return summary

    def get_summary(self, document_id: int) -> Optional[AiInsightResult]:
        record = self.store.get_document(document_id)
        if record is None or not record.ai_summary:
            return None
        return AiInsightResult.from_json(record.ai_summary)


__all__ = [
    "DocumentInsightService",
    "IngestReport",
    "InsightServiceError",
    "NoChunksError",
    "NoExtractableTextError",
]
