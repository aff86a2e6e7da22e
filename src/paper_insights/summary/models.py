"""Schemas for model output and the persisted, citation-resolved summary."""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AiInsightSection(_CamelModel):
    """The four prose fields of a Critical Technical Summary."""

    methodology: StrictStr
    mechanism: StrictStr
    results: StrictStr
    conclusion: StrictStr


class LlmCitation(_CamelModel):
    """Inline marker number and the transient CitationIDs it points at.

    Both are strict integers: ``"1"`` or ``true`` from the model is rejected
    rather than coerced into a chunk reference.
    """

    ref_index: StrictInt
    citation_ids: List[StrictInt]


class LlmResponse(_CamelModel):
    """Structured output requested from the text-generation model."""

    sections: AiInsightSection
    citations: List[LlmCitation]


def _coerce_identifier(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("identifier must not be a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return int(value.strip())
    raise ValueError(f"identifier must be an integer or a string of digits, got {value!r}")


class SummaryChunk(_CamelModel):
    """Chunk-like record handed to the summary resolver.

    Identifiers may arrive as strings or arbitrarily large integers from the
    store; they are kept as exact Python ``int`` values.
    """

    content: str
    phrase: str
    page_start: int
    page_end: int
    char_start: int
    char_end: int
    id: Optional[int] = None
    document_id: Optional[int] = None

    @field_validator("id", "document_id", mode="before")
    @classmethod
    def _validate_identifier(cls, value: Any) -> Optional[int]:
        return _coerce_identifier(value)


class AiCitation(_CamelModel):
    """A citation resolved to an exact, persistent source span."""

    ref_index: int
    chunk_id: Optional[int] = None
    document_id: Optional[int] = None
    page_start: int
    page_end: int
    phrase: str
    char_start: int
    char_end: int


class AiInsightResult(_CamelModel):
    """Summary prose plus fully resolved citations; persisted verbatim."""

    sections: AiInsightSection
    citations: List[AiCitation] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "AiInsightResult":
        return cls.model_validate_json(payload)


__all__ = [
    "AiCitation",
    "AiInsightResult",
    "AiInsightSection",
    "LlmCitation",
    "LlmResponse",
    "SummaryChunk",
]
