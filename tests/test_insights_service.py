import json
import logging

import pytest

from conftest import ScriptedLLM, StaticExtractor, llm_payload
from paper_insights.ingest import ExtractionError, IngestPipeline
from paper_insights.ingest.models import PageContent
from paper_insights.logging_config import AUDIT_LOGGER_NAME
from paper_insights.services import DocumentInsightService, NoChunksError, NoExtractableTextError
from paper_insights.storage import InMemoryDocumentStore
from paper_insights.summary.resolver import SUMMARY_FAILURE_MESSAGE, SummaryResolver


def _service(pages, llm, store=None):
    store = store or InMemoryDocumentStore()
    pipeline = IngestPipeline(extractor=StaticExtractor(pages))
    return DocumentInsightService(store, pipeline=pipeline, resolver=SummaryResolver(llm)), store


def test_ingest_persists_chunks_and_summary(two_pages, caplog) -> None:
    llm = ScriptedLLM(llm_payload([{"refIndex": 1, "citationIds": [0]}]))
    service, store = _service(two_pages, llm)

    with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER_NAME):
        report = service.ingest(7, b"v1", "paper.pdf")

    assert report.skipped is False
    assert report.summary_generated is True
    assert report.chunks_processed == 1

    record = store.get_document(7)
    assert record.file_hash == report.checksum
    assert [chunk.id for chunk in record.chunks] == [1]

    summary = service.get_summary(7)
    assert summary.citations[0].chunk_id == 1
    assert summary.citations[0].document_id == 7
    assert summary.citations[0].page_end == 2

    audit = [record.msg for record in caplog.records if record.name == AUDIT_LOGGER_NAME]
    assert audit == [{"event": "ingest", "document_id": 7, "file_name": "paper.pdf", "chunk_count": 1}]


def test_unchanged_file_is_skipped(two_pages) -> None:
    llm = ScriptedLLM(llm_payload([]))
    service, store = _service(two_pages, llm)
    service.ingest(1, b"same", "a.pdf")

    report = service.ingest(1, b"same", "a.pdf")

    assert report.skipped is True
    assert report.chunks_processed == 0
    assert len(llm.calls) == 1
    assert service.pipeline.extractor.calls == 1


def test_changed_file_replaces_chunks(two_pages) -> None:
    llm = ScriptedLLM(llm_payload([{"refIndex": 1, "citationIds": [0]}]))
    service, store = _service(two_pages, llm)
    first = service.ingest(1, b"v1", "a.pdf")

    second = service.ingest(1, b"v2", "a.pdf")

    assert second.skipped is False
    assert second.checksum != first.checksum
    assert [chunk.id for chunk in store.list_chunks(1)] == [2]
    assert service.get_summary(1).citations[0].chunk_id == 2
    assert len(llm.calls) == 2


def test_degraded_summary_does_not_block_retry(two_pages) -> None:
    llm = ScriptedLLM(error=RuntimeError("backend down"))
    service, store = _service(two_pages, llm)

    service.ingest(1, b"v1", "a.pdf")
    assert service.get_summary(1).sections.methodology == SUMMARY_FAILURE_MESSAGE

    llm.error = None
    llm.response = llm_payload([])
    report = service.ingest(1, b"v1", "a.pdf")

    assert report.skipped is True
    regenerated = json.loads(service.regenerate_summary(1))
    assert regenerated["sections"]["methodology"] == "Text methodology [1]."


def test_document_without_text_is_rejected() -> None:
    service, store = _service([], ScriptedLLM(llm_payload([])))

    with pytest.raises(NoExtractableTextError):
        service.ingest(3, b"scan", "scan.pdf")
    assert store.get_document(3) is None


def test_extraction_errors_propagate() -> None:
    class _BrokenExtractor:
        def extract(self, data):
            raise ExtractionError("corrupt")

    store = InMemoryDocumentStore()
    service = DocumentInsightService(
        store,
        pipeline=IngestPipeline(extractor=_BrokenExtractor()),
        resolver=SummaryResolver(ScriptedLLM(llm_payload([]))),
    )

    with pytest.raises(ExtractionError):
        service.ingest(1, b"bad", "bad.pdf")


def test_regenerate_requires_stored_chunks() -> None:
    service, _ = _service([], ScriptedLLM(llm_payload([])))

    with pytest.raises(NoChunksError):
        service.regenerate_summary(42)


def test_regenerate_passes_question_to_backend(two_pages) -> None:
    llm = ScriptedLLM(llm_payload([]))
    service, _ = _service(two_pages, llm)
    service.ingest(1, b"v1", "a.pdf")

    service.regenerate_summary(1, question="Focus on the ablation study.")

    assert "Focus on the ablation study." in llm.calls[-1][0]


def test_get_summary_for_unknown_document() -> None:
    service, _ = _service([], ScriptedLLM(llm_payload([])))

    assert service.get_summary(404) is None


def test_identifiers_beyond_64_bits_survive_the_round_trip() -> None:
    first_id = 2**64 + 5
    pages = [PageContent(1, "y" * 3000)]
    llm = ScriptedLLM(llm_payload([{"refIndex": 1, "citationIds": [1]}]))
    service, store = _service(pages, llm, InMemoryDocumentStore(first_chunk_id=first_id))

    service.ingest(2**63 + 1, b"big", "big.pdf")

    citation = service.get_summary(2**63 + 1).citations[0]
    assert citation.chunk_id == first_id + 1
    assert citation.document_id == 2**63 + 1
    assert citation.char_start == 1680


def test_default_service_pipeline_follows_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHUNK_SIZE_CHARS", "1200")
    monkeypatch.setenv("CHUNK_OVERLAP_CHARS", "200")

    service = DocumentInsightService(InMemoryDocumentStore())

    assert service.pipeline.chunker.config.chunk_chars == 1200
    assert service.pipeline.chunker.config.overlap_chars == 200
