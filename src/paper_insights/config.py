"""Environment-driven settings for the insights pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE_TOKENS = 500
DEFAULT_OVERLAP_TOKENS = 80
CHARS_PER_TOKEN = 4

DEFAULT_CHUNK_CHARS = DEFAULT_CHUNK_SIZE_TOKENS * CHARS_PER_TOKEN
DEFAULT_OVERLAP_CHARS = DEFAULT_OVERLAP_TOKENS * CHARS_PER_TOKEN
DEFAULT_PHRASE_MAX_WORDS = 20
DEFAULT_PHRASE_MAX_CHARS = 150

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(slots=True)
class Settings:
    """Snapshot of the environment used to wire the pipeline together."""

    chunk_chars: int = DEFAULT_CHUNK_CHARS
    overlap_chars: int = DEFAULT_OVERLAP_CHARS
    phrase_max_words: int = DEFAULT_PHRASE_MAX_WORDS
    phrase_max_chars: int = DEFAULT_PHRASE_MAX_CHARS
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    llm_temperature: Optional[float] = None
    llm_provider: str = "gemini"
    llm_stub: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        return cls(
            chunk_chars=_env_int("CHUNK_SIZE_CHARS", DEFAULT_CHUNK_CHARS),
            overlap_chars=_env_int("CHUNK_OVERLAP_CHARS", DEFAULT_OVERLAP_CHARS),
            phrase_max_words=_env_int("PHRASE_MAX_WORDS", DEFAULT_PHRASE_MAX_WORDS),
            phrase_max_chars=_env_int("PHRASE_MAX_CHARS", DEFAULT_PHRASE_MAX_CHARS),
            gemini_api_key=api_key.strip() if api_key and api_key.strip() else None,
            gemini_model=_env_str("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            llm_temperature=_env_float("LLM_TEMPERATURE", None),
            llm_provider=_env_str("LLM_PROVIDER", "gemini").lower(),
            llm_stub=_env_flag("LLM_STUB"),
        )


__all__ = [
    "CHARS_PER_TOKEN",
    "DEFAULT_CHUNK_CHARS",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OVERLAP_CHARS",
    "DEFAULT_PHRASE_MAX_CHARS",
    "DEFAULT_PHRASE_MAX_WORDS",
    "Settings",
]
