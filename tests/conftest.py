"""Shared fixtures and lightweight fakes for the test-suite."""
from __future__ import annotations

import json
from typing import Iterable, List, Optional, Sequence

import pytest

from paper_insights.ingest.models import PageContent
from paper_insights.llm_provider import LLM, reset_llm


class ScriptedLLM(LLM):
    """LLM fake that returns a fixed payload (or raises) and records prompts."""

    provider = "scripted"

    def __init__(self, response: Optional[str] = None, *, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[tuple[str, bool]] = []

    @property
    def model_name(self) -> str:
        return "scripted"

    @property
    def ready(self) -> bool:
        return True

    def generate(self, prompt: str, *, json_output: bool = True) -> str:
        self.calls.append((prompt, json_output))
        if self.error is not None:
            raise self.error
        return self.response  # type: ignore[return-value]


class StaticExtractor:
    """Extractor fake returning pre-built pages regardless of the input bytes."""

    def __init__(self, pages: Sequence[PageContent]) -> None:
        self.pages = list(pages)
        self.calls = 0

    def extract(self, data: bytes) -> List[PageContent]:
        self.calls += 1
        return list(self.pages)


def make_sections(prefix: str = "Text") -> dict:
    return {
        "methodology": f"{prefix} methodology [1].",
        "mechanism": f"{prefix} mechanism [1].",
        "results": f"{prefix} results [2].",
        "conclusion": f"{prefix} conclusion [2].",
    }


def llm_payload(citations: Iterable[dict], sections: Optional[dict] = None) -> str:
    return json.dumps({"sections": sections or make_sections(), "citations": list(citations)})


@pytest.fixture(autouse=True)
def _isolated_llm(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "LLM_PROVIDER",
        "LLM_STUB",
        "GEMINI_MODEL",
        "CHUNK_SIZE_CHARS",
        "CHUNK_OVERLAP_CHARS",
        "PHRASE_MAX_WORDS",
        "PHRASE_MAX_CHARS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_llm()
    yield
    reset_llm()


@pytest.fixture()
def two_pages() -> List[PageContent]:
    return [
        PageContent(page_number=1, text="Page One Content. "),
        PageContent(page_number=2, text="Page Two Content. "),
    ]


@pytest.fixture()
def sample_chunks() -> List[dict]:
    return [
        {
            "id": 101,
            "documentId": 7,
            "content": "Transformers replace recurrence with attention.",
            "phrase": "Transformers replace recurrence with attention.",
            "pageStart": 1,
            "pageEnd": 1,
            "charStart": 0,
            "charEnd": 47,
        },
        {
            "id": 102,
            "documentId": 7,
            "content": "The model reaches 28.4 BLEU on the WMT 2014 task.",
            "phrase": "The model reaches 28.4 BLEU",
            "pageStart": 2,
            "pageEnd": 3,
            "charStart": 40,
            "charEnd": 89,
        },
    ]
