"""Structured lifecycle events for chunking, summary generation and ingest."""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

LOGGER = logging.getLogger("paper_insights.telemetry")

_PREVIEW_CHARS = 120


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    document_id: object | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Log ``step`` as a dict event carrying ids, timing, details and any traceback."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if req_id:
        event["req_id"] = req_id
    if document_id is not None:
        event["document_id"] = document_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_llm_provider_init(*, provider: str, model: str, ready: bool, reason: str | None = None) -> None:
    details = {"provider": provider, "model": model, "ready": ready}
    if reason:
        details["reason"] = reason
    log_event(LOGGER, "llm.provider.init", details=details)


def emit_chunking_event(
    *,
    pages: int,
    total_chars: int,
    chunks: int,
    chunk_chars: int,
    overlap_chars: int,
    duration_ms: float,
) -> None:
    details = {
        "pages": pages,
        "total_chars": total_chars,
        "chunks": chunks,
        "chunk_chars": chunk_chars,
        "overlap_chars": overlap_chars,
    }
    log_event(LOGGER, "chunking.complete", level="debug", duration_ms=duration_ms, details=details)


def emit_prompt_event(*, req_id: str, chunks: int, prompt_len: int, question: str) -> None:
    details = {
        "chunks": chunks,
        "prompt_len": prompt_len,
        "question_preview": question[:_PREVIEW_CHARS],
    }
    log_event(LOGGER, "prompt.compose", req_id=req_id, details=details)


def emit_summary_request(*, req_id: str, model: str, prompt_preview: str, citation_ids: Iterable[int]) -> None:
    details = {
        "model": model,
        "prompt_preview": prompt_preview[:_PREVIEW_CHARS],
        "citation_ids": len(list(citation_ids)),
    }
    log_event(LOGGER, "summary.request", req_id=req_id, details=details)


def emit_summary_result(
    *,
    req_id: str,
    model: str,
    duration_ms: float,
    fallback: bool,
    citations_requested: int,
    citations_resolved: int,
) -> None:
    details = {
        "model": model,
        "fallback": fallback,
        "citations_requested": citations_requested,
        "citations_resolved": citations_resolved,
        "citations_dropped": max(citations_requested - citations_resolved, 0),
    }
    log_event(LOGGER, "summary.result", req_id=req_id, duration_ms=duration_ms, details=details)


def emit_ingest_event(
    step: str,
    *,
    document_id: object,
    file_name: str,
    size_bytes: int | None = None,
    checksum: str | None = None,
    pages: int | None = None,
    chunks: int | None = None,
    duration_ms: float | None = None,
    skipped: bool | None = None,
) -> None:
    details = {
        "file": file_name,
        "size_bytes": size_bytes,
        "checksum": checksum,
        "pages": pages,
        "chunks": chunks,
        "skipped": skipped,
    }
    log_event(LOGGER, step, document_id=document_id, duration_ms=duration_ms, details=details)


def emit_exception(
    *,
    module: str,
    error: BaseException,
    req_id: str | None = None,
    document_id: object | None = None,
    suggestion: str | None = None,
) -> None:
    details = {"module": module}
    if suggestion:
        details["suggestion"] = suggestion
    log_event(
        LOGGER,
        "exception",
        level="error",
        req_id=req_id,
        document_id=document_id,
        details=details,
        exc=error,
    )


@contextmanager
def traced_duration(step: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[None]:
    start = time.perf_counter()
    log_event(logger or LOGGER, f"{step}.start", details=fields)
    try:
        yield
    except Exception as error:
        log_event(logger or LOGGER, f"{step}.error", level="error", details=fields, exc=error)
        raise
    finally:
        end = time.perf_counter()
        log_event(
            logger or LOGGER,
            f"{step}.complete",
            duration_ms=(end - start) * 1000.0,
            details=fields,
        )


__all__ = [
    "emit_chunking_event",
    "emit_exception",
    "emit_ingest_event",
    "emit_llm_provider_init",
    "emit_prompt_event",
    "emit_summary_request",
    "emit_summary_result",
    "log_event",
    "traced_duration",
]
