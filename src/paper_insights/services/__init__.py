"""Service layer combining ingestion, persistence and summary generation."""
from __future__ import annotations

from .insights import (
    DocumentInsightService,
    IngestReport,
    InsightServiceError,
    NoChunksError,
    NoExtractableTextError,
)

__all__ = [
    "DocumentInsightService",
    "IngestReport",
    "InsightServiceError",
    "NoChunksError",
    "NoExtractableTextError",
]
