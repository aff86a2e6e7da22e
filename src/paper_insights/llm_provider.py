"""Text-generation backends used by the summary resolver."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import types

from paper_insights.config import Settings
from paper_insights.telemetry import emit_llm_provider_init

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LLMStatus:
    """Readiness snapshot of the configured text-generation backend."""

    ready: bool
    provider: str
    model_name: str
    error: Optional[str] = None


class LLMError(RuntimeError):
    """Base exception for text-generation backend failures."""


class LLMNotReadyError(LLMError):
    """Raised when the backend is not configured or cannot be reached."""


class LLMGenerationError(LLMError):
    """Raised when text generation fails or returns nothing usable."""


class LLM:
    """Interface the summary resolver expects from a text-generation backend."""

    provider = "base"

    def generate(self, prompt: str, *, json_output: bool = True) -> str:
        """Return the model's text for ``prompt``, asking for JSON when ``json_output`` is set."""

        raise NotImplementedError

    @property
    def model_name(self) -> str:
        return "stub"

    @property
    def ready(self) -> bool:
        return False

    @property
    def last_error(self) -> Optional[str]:
        return None

    def status(self) -> LLMStatus:
        return LLMStatus(
            ready=self.ready,
            provider=self.provider,
            model_name=self.model_name,
            error=self.last_error,
        )


class LLMStub(LLM):
    """Placeholder used when no generation backend is configured."""

    provider = "stub"

    def __init__(self, *, reason: str | None = None) -> None:
        self._reason = reason or "LLM stub is active (model not configured)."

    def generate(self, prompt: str, *, json_output: bool = True) -> str:
        raise LLMNotReadyError(self._reason)

    @property
    def last_error(self) -> Optional[str]:
        return self._reason


class GeminiLLM(LLM):
    """Gemini backend built on the ``google-genai`` SDK."""

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        temperature: float | None = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._client = client or genai.Client(api_key=api_key)
        self._last_error: Optional[str] = None

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def ready(self) -> bool:
        return True

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def _build_config(self, json_output: bool) -> types.GenerateContentConfig:
        kwargs: dict[str, object] = {}
        if json_output:
            kwargs["response_mime_type"] = "application/json"
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        return types.GenerateContentConfig(**kwargs)

    def generate(self, prompt: str, *, json_output: bool = True) -> str:
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=self._build_config(json_output),
            )
        except Exception as error:
            self._last_error = str(error)
            raise LLMGenerationError(f"Gemini request failed: {error}") from error

        text = getattr(response, "text", None)
        if not text or not text.strip():
            self._last_error = "empty response"
            raise LLMGenerationError("Gemini returned an empty response")
        self._last_error = None
        return text


_LLM_LOCK = threading.Lock()
_LLM_INSTANCE: Optional[LLM] = None


def create_llm(settings: Optional[Settings] = None) -> LLM:
    """Build an LLM for the given settings without caching it."""

    settings = settings or Settings.from_env()

    if settings.llm_stub:
        LOGGER.warning("LLM_STUB flag enabled; summaries will degrade to the failure message.")
        llm: LLM = LLMStub(reason="LLM stub forced via LLM_STUB.")
    elif settings.llm_provider == "mock":
        from paper_insights.providers.mock_llm import MockLLMProvider

        llm = MockLLMProvider()
    elif settings.llm_provider != "gemini":
        LOGGER.warning("Unknown LLM_PROVIDER %r; using stub backend.", settings.llm_provider)
        llm = LLMStub(reason=f"Unsupported LLM provider: {settings.llm_provider}")
    elif not settings.gemini_api_key:
        LOGGER.warning("GEMINI_API_KEY is not configured; using stub backend.")
        llm = LLMStub(reason="GEMINI_API_KEY is not configured.")
    else:
        llm = GeminiLLM(
            settings.gemini_api_key,
            model=settings.gemini_model,
            temperature=settings.llm_temperature,
        )

    emit_llm_provider_init(
        provider=llm.provider,
        model=llm.model_name,
        ready=llm.ready,
        reason=llm.last_error,
    )
    return llm


def get_llm() -> LLM:
    """Return the process-wide LLM, creating it from the environment on first use."""

    global _LLM_INSTANCE
    with _LLM_LOCK:
        if _LLM_INSTANCE is None:
            _LLM_INSTANCE = create_llm()
        return _LLM_INSTANCE


def reset_llm() -> None:
    """Forget the cached LLM so the next :func:`get_llm` call re-reads the environment."""

    global _LLM_INSTANCE
    with _LLM_LOCK:
        _LLM_INSTANCE = None


def get_llm_status() -> LLMStatus:
    return get_llm().status()


__all__ = [
    "GeminiLLM",
    "LLM",
    "LLMError",
    "LLMGenerationError",
    "LLMNotReadyError",
    "LLMStatus",
    "LLMStub",
    "create_llm",
    "get_llm",
    "get_llm_status",
    "reset_llm",
]
