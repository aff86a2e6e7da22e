"""Utilities for constructing the citation-grounded summary prompt."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from .models import SummaryChunk

_PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts" / "summary"
_SYSTEM_PROMPT_PATH = _PROMPTS_DIR / "system.txt"

DEFAULT_QUESTION = "Generate a comprehensive Critical Technical Summary of this research paper."
UNKNOWN_DOCUMENT = "unknown"


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


SYSTEM_INSTRUCTIONS = _load_template(_SYSTEM_PROMPT_PATH)


@dataclass(slots=True, frozen=True)
class SummaryPrompt:
    """Prompt text together with the call-scoped CitationID lookup."""

    text: str
    chunk_map: Dict[int, SummaryChunk]


def format_chunk_block(citation_id: int, chunk: SummaryChunk) -> str:
    document = chunk.document_id if chunk.document_id is not None else UNKNOWN_DOCUMENT
    return (
        f"[CitationID: {citation_id}] (Document: {document}) "
        f"(Page {chunk.page_start}-{chunk.page_end}) \"{chunk.phrase}...\"\n"
        f"{chunk.content}"
    )


def build_summary_prompt(chunks: Sequence[SummaryChunk], question: Optional[str] = None) -> SummaryPrompt:
    """Compose the summary prompt and the map from CitationID to chunk."""

    chunk_map: Dict[int, SummaryChunk] = {}
    blocks = []
    for citation_id, chunk in enumerate(chunks):
        chunk_map[citation_id] = chunk
        blocks.append(format_chunk_block(citation_id, chunk))

    context_block = "\n\n".join(blocks) if blocks else "No context available."
    query = (question or "").strip() or DEFAULT_QUESTION
    text = f"Context:\n{context_block}\n\n{SYSTEM_INSTRUCTIONS}\n\nQuestion:\n{query}"
    return SummaryPrompt(text=text, chunk_map=chunk_map)


__all__ = [
    "DEFAULT_QUESTION",
    "SYSTEM_INSTRUCTIONS",
    "SummaryPrompt",
    "UNKNOWN_DOCUMENT",
    "build_summary_prompt",
    "format_chunk_block",
]
