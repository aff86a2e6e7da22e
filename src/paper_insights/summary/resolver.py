"""Citation-grounded summary generation.

One call sends every chunk to the text-generation backend, validates the JSON
it returns, and maps each transient CitationID back to the chunk's persistent
identifiers, page range and character offsets. Failures while reading the
input chunks, calling the backend or parsing its answer never escape: they
produce a degraded result carrying a fixed message and no citations.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from paper_insights.llm_provider import LLM, get_llm
from paper_insights.telemetry import (
    emit_exception,
    emit_prompt_event,
    emit_summary_request,
    emit_summary_result,
)

from .models import AiCitation, AiInsightResult, AiInsightSection, LlmResponse, SummaryChunk
from .prompt import DEFAULT_QUESTION, build_summary_prompt

LOGGER = logging.getLogger(__name__)

SUMMARY_FAILURE_MESSAGE = "AI summary generation failed. Please try again later."

_CHUNK_FIELDS = (
    "content",
    "phrase",
    "page_start",
    "page_end",
    "char_start",
    "char_end",
    "id",
    "document_id",
)


class SummaryParseError(ValueError):
    """Raised when model output is empty, not JSON, or not the expected shape."""


def to_summary_chunk(record: Any) -> SummaryChunk:
    """Normalise a mapping or chunk-like object into a :class:`SummaryChunk`."""

    if isinstance(record, SummaryChunk):
        return record
    if isinstance(record, Mapping):
        return SummaryChunk.model_validate(dict(record))
    values = {name: getattr(record, name) for name in _CHUNK_FIELDS if hasattr(record, name)}
    return SummaryChunk.model_validate(values)


def parse_llm_response(text: Optional[str]) -> LlmResponse:
    """Parse and structurally validate raw model output."""

    if text is None or not text.strip():
        raise SummaryParseError("model returned an empty response")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise SummaryParseError(f"model response is not valid JSON: {error}") from error
    try:
        return LlmResponse.model_validate(payload)
    except ValidationError as error:
        raise SummaryParseError(f"model response does not match the summary schema: {error}") from error


def resolve_citations(response: LlmResponse, chunk_map: Mapping[int, SummaryChunk]) -> List[AiCitation]:
    """Replace transient CitationIDs with the chunk provenance they point at.

    Output follows the model's citation order, then each entry's
    ``citationIds`` order. Unknown CitationIDs are skipped.
    """

    resolved: List[AiCitation] = []
    for citation in response.citations:
        for citation_id in citation.citation_ids:
            chunk = chunk_map.get(citation_id)
            if chunk is None:
                LOGGER.debug(
                    "Dropping citation [%s]: CitationID %s is not in the prompt",
                    citation.ref_index,
                    citation_id,
                )
                continue
            resolved.append(
                AiCitation(
                    ref_index=citation.ref_index,
                    chunk_id=chunk.id,
                    document_id=chunk.document_id,
                    page_start=chunk.page_start,
                    page_end=chunk.page_end,
                    phrase=chunk.phrase,
                    char_start=chunk.char_start,
                    char_end=chunk.char_end,
                )
            )
    return resolved


def degraded_result(message: str = SUMMARY_FAILURE_MESSAGE) -> AiInsightResult:
    """Structurally valid summary used when generation fails."""

    return AiInsightResult(
        sections=AiInsightSection(
            methodology=message,
            mechanism=message,
            results=message,
            conclusion=message,
        ),
        citations=[],
    )


def _requested_citations(response: LlmResponse) -> int:
    return sum(len(citation.citation_ids) for citation in response.citations)


class SummaryResolver:
    """Run one summary round-trip and resolve its citations.

    The resolver keeps no per-call state on the instance, so one instance can
    serve concurrent callers.
    """

    def __init__(self, llm: Optional[LLM] = None, *, failure_message: str = SUMMARY_FAILURE_MESSAGE) -> None:
        if not failure_message.strip():
            raise ValueError("failure_message must not be empty")
        self._llm = llm
        self.failure_message = failure_message

    @property
    def llm(self) -> LLM:
        return self._llm if self._llm is not None else get_llm()

    def summarize(self, chunks: Iterable[Any], question: Optional[str] = None) -> AiInsightResult:
        req_id = uuid.uuid4().hex
        started = time.perf_counter()
        model_name = "unavailable"
        try:
            summary_chunks: Sequence[SummaryChunk] = [to_summary_chunk(chunk) for chunk in chunks]
            prompt = build_summary_prompt(summary_chunks, question)
            emit_prompt_event(
                req_id=req_id,
                chunks=len(summary_chunks),
                prompt_len=len(prompt.text),
                question=question or DEFAULT_QUESTION,
            )

            llm = self.llm
            model_name = llm.model_name
            emit_summary_request(
                req_id=req_id,
                model=model_name,
                prompt_preview=prompt.text,
                citation_ids=prompt.chunk_map.keys(),
            )
            raw = llm.generate(prompt.text, json_output=True)
            response = parse_llm_response(raw)
        except Exception as error:
            LOGGER.exception("Summary generation failed; returning degraded result")
            emit_exception(module=f"{__name__}.generate", error=error, req_id=req_id)
            emit_summary_result(
                req_id=req_id,
                model=model_name,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                fallback=True,
                citations_requested=0,
                citations_resolved=0,
            )
            return degraded_result(self.failure_message)

        citations = resolve_citations(response, prompt.chunk_map)
        emit_summary_result(
            req_id=req_id,
            model=model_name,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            fallback=False,
            citations_requested=_requested_citations(response),
            citations_resolved=len(citations),
        )
        return AiInsightResult(sections=response.sections, citations=citations)

    def generate(self, chunks: Iterable[Any], question: Optional[str] = None) -> str:
        """Return the serialised :class:`AiInsightResult` ready for persistence."""

        return self.summarize(chunks, question).to_json()


def generate_document_summary(
    chunks: Iterable[Any],
    *,
    llm: Optional[LLM] = None,
    question: Optional[str] = None,
) -> str:
    """Generate and serialise a citation-resolved summary for ``chunks``."""

    return SummaryResolver(llm).generate(chunks, question)


__all__ = [
    "SUMMARY_FAILURE_MESSAGE",
    "SummaryParseError",
    "SummaryResolver",
    "degraded_result",
    "generate_document_summary",
    "parse_llm_response",
    "resolve_citations",
    "to_summary_chunk",
]
