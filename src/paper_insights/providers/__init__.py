"""Provider exports for offline LLM backends."""
from __future__ import annotations

from .mock_llm import MockLLMProvider

__all__ = ["MockLLMProvider"]
