#!/usr/bin/env python3
"""CLI helper that chunks a PDF and prints its citation-resolved summary."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _load_dotenv() -> None:
    from dotenv import load_dotenv

    project_root = Path(__file__).resolve().parents[1]
    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(dotenv_path=env_file)
    else:  # pragma: no cover - fallback path
        load_dotenv()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("pdf", type=Path, help="Path to the PDF to summarise.")
    parser.add_argument("--document-id", type=int, default=1, help="Identifier stored with each chunk.")
    parser.add_argument("--question", default=None, help="Optional focus question for the summary.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _load_dotenv()

    from paper_insights.config import Settings
    from paper_insights.ingest import ChunkingConfig, ChunkingConfigError, ExtractionError, IngestPipeline
    from paper_insights.llm_provider import get_llm_status
    from paper_insights.logging_config import configure_logging
    from paper_insights.services import DocumentInsightService, InsightServiceError
    from paper_insights.storage import InMemoryDocumentStore
    from paper_insights.summary import SummaryResolver

    configure_logging()
    settings = Settings.from_env()
    status = get_llm_status()
    if not status.ready:
        logging.warning("LLM backend not ready (%s); the summary will be degraded.", status.error)

    store = InMemoryDocumentStore()
    try:
        pipeline = IngestPipeline(ChunkingConfig.from_settings(settings))
        service = DocumentInsightService(store, pipeline=pipeline, resolver=SummaryResolver())
        service.ingest(args.document_id, args.pdf.read_bytes(), args.pdf.name, question=args.question)
        summary = store.get_document(args.document_id).ai_summary
    except (OSError, ChunkingConfigError, ExtractionError, InsightServiceError) as error:
        logging.error("Failed to summarise %s: %s", args.pdf, error)
        return 1

    sys.stdout.write(f"{summary}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
