"""Citation-grounded AI summary generation."""
from __future__ import annotations

from .models import (
    AiCitation,
    AiInsightResult,
    AiInsightSection,
    LlmCitation,
    LlmResponse,
    SummaryChunk,
)
from .prompt import SummaryPrompt, build_summary_prompt
from .resolver import (
    SUMMARY_FAILURE_MESSAGE,
    SummaryParseError,
    SummaryResolver,
    degraded_result,
    generate_document_summary,
    parse_llm_response,
    resolve_citations,
)

__all__ = [
    "AiCitation",
    "AiInsightResult",
    "AiInsightSection",
    "LlmCitation",
    "LlmResponse",
    "SUMMARY_FAILURE_MESSAGE",
    "SummaryChunk",
    "SummaryParseError",
    "SummaryPrompt",
    "SummaryResolver",
    "build_summary_prompt",
    "degraded_result",
    "generate_document_summary",
    "parse_llm_response",
    "resolve_citations",
]
