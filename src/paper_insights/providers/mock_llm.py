"""Mock LLM provider returning deterministic, schema-valid summaries."""
from __future__ import annotations

import json
import re

from paper_insights.llm_provider import LLM

_CITATION_ID_RE = re.compile(r"\[CitationID: (\d+)\]")


class MockLLMProvider(LLM):
    """Cite every CitationID found in the prompt, one marker per chunk."""

    provider = "mock"

    @property
    def model_name(self) -> str:
        return "mock-summary"

    @property
    def ready(self) -> bool:
        return True

    def generate(self, prompt: str, *, json_output: bool = True) -> str:
        del json_output  # The mock always answers in JSON.
        citation_ids = [int(value) for value in _CITATION_ID_RE.findall(prompt)]
        markers = " ".join(f"[{ref}]" for ref in range(1, len(citation_ids) + 1))
        sections = {
            "methodology": f"MOCK_METHODOLOGY {markers}".strip(),
            "mechanism": f"MOCK_MECHANISM {markers}".strip(),
            "results": f"MOCK_RESULTS {markers}".strip(),
            "conclusion": f"MOCK_CONCLUSION {markers}".strip(),
        }
        citations = [
            {"refIndex": ref, "citationIds": [citation_id]}
            for ref, citation_id in enumerate(citation_ids, start=1)
        ]
        return json.dumps({"sections": sections, "citations": citations})
