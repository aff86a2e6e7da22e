"""Tests for LLM backend selection and the Gemini adapter."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from paper_insights import llm_provider
from paper_insights.config import Settings
from paper_insights.llm_provider import (
    GeminiLLM,
    LLMGenerationError,
    LLMNotReadyError,
    LLMStub,
    create_llm,
    get_llm,
    get_llm_status,
    reset_llm,
)
from paper_insights.providers import MockLLMProvider


class _FakeModels:
    def __init__(self, *, text=None, error=None) -> None:
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class _FakeClient:
    def __init__(self, *, text=None, error=None) -> None:
        self.models = _FakeModels(text=text, error=error)


def test_gemini_requests_json_output() -> None:
    client = _FakeClient(text='{"ok": true}')
    llm = GeminiLLM("key", model="gemini-test", temperature=0.2, client=client)

    assert llm.generate("prompt") == '{"ok": true}'

    call = client.models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "prompt"
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].temperature == pytest.approx(0.2)


def test_gemini_plain_text_mode_omits_mime_type() -> None:
    client = _FakeClient(text="plain")
    llm = GeminiLLM("key", model="gemini-test", client=client)

    llm.generate("prompt", json_output=False)

    config = client.models.calls[0]["config"]
    assert config.response_mime_type is None
    assert config.temperature is None


def test_gemini_transport_error_is_wrapped() -> None:
    llm = GeminiLLM("key", model="gemini-test", client=_FakeClient(error=ConnectionError("offline")))

    with pytest.raises(LLMGenerationError, match="offline"):
        llm.generate("prompt")
    assert llm.last_error == "offline"


@pytest.mark.parametrize("text", (None, "", "   "))
def test_gemini_empty_response_is_an_error(text) -> None:
    llm = GeminiLLM("key", model="gemini-test", client=_FakeClient(text=text))

    with pytest.raises(LLMGenerationError):
        llm.generate("prompt")
    assert llm.status().error == "empty response"


def test_stub_refuses_to_generate() -> None:
    stub = LLMStub(reason="not configured")

    with pytest.raises(LLMNotReadyError, match="not configured"):
        stub.generate("prompt")
    status = stub.status()
    assert status.ready is False
    assert status.provider == "stub"
    assert status.error == "not configured"


def test_create_llm_without_key_returns_stub() -> None:
    llm = create_llm(Settings())

    assert isinstance(llm, LLMStub)
    assert "GEMINI_API_KEY" in llm.last_error


def test_create_llm_honours_stub_flag() -> None:
    llm = create_llm(Settings(gemini_api_key="key", llm_stub=True))

    assert isinstance(llm, LLMStub)


def test_create_llm_selects_mock_provider() -> None:
    llm = create_llm(Settings(llm_provider="mock"))

    assert isinstance(llm, MockLLMProvider)
    assert llm.ready


def test_create_llm_unknown_provider_returns_stub() -> None:
    llm = create_llm(Settings(gemini_api_key="key", llm_provider="llama"))

    assert isinstance(llm, LLMStub)
    assert "llama" in llm.last_error


def test_create_llm_builds_gemini_client(monkeypatch: pytest.MonkeyPatch) -> None:
    created = {}

    def fake_client(*, api_key):
        created["api_key"] = api_key
        return _FakeClient(text="{}")

    monkeypatch.setattr(llm_provider.genai, "Client", fake_client)

    llm = create_llm(Settings(gemini_api_key="secret", gemini_model="gemini-x"))

    assert isinstance(llm, GeminiLLM)
    assert llm.model_name == "gemini-x"
    assert created == {"api_key": "secret"}


def test_get_llm_is_cached_until_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")

    first = get_llm()
    assert get_llm() is first
    assert get_llm_status().provider == "mock"

    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    reset_llm()

    assert isinstance(get_llm(), LLMStub)


def test_google_api_key_is_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(llm_provider.genai, "Client", lambda *, api_key: _FakeClient(text="{}"))
    monkeypatch.setenv("GOOGLE_API_KEY", "fallback-key")

    assert isinstance(get_llm(), GeminiLLM)
