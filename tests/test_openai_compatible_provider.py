"""Tests for the OpenAI-compatible provider handles."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import openai
import pytest

from aistudio.core.chat import ChatRole, ChatThread, ContentBlock, ContentText, ContentType
from aistudio.core.config import Host, LLMProviders, ProviderSettings
from aistudio.core.providers.base import thread_to_messages
from aistudio.core.providers.error_mapping import map_connection_error, map_status_error
from aistudio.core.providers.errors import ProviderConfigurationError
from aistudio.core.providers.openai import (
    ProviderMistral,
    ProviderOpenAI,
    ProviderSelfHosted,
    _classify_openai_error,
)


def _block(role: ChatRole, text: str) -> ContentBlock:
    return ContentBlock(
        time=datetime.now(timezone.utc),
        content_type=ContentType.TEXT,
        role=role,
        content=ContentText(text=text),
    )


def _thread() -> ChatThread:
    return ChatThread(
        seed=1234,
        system_prompt="Translate.",
        blocks=[
            _block(ChatRole.USER, "Hallo"),
            _block(ChatRole.AI, "Hello"),
            _block(ChatRole.SYSTEM, "ignored"),
            _block(ChatRole.USER, "Tschüss"),
            _block(ChatRole.AI, ""),
        ],
    )


class _FakeStream:
    def __init__(self, texts):
        self._chunks = [
            SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=t))])
            for t in texts
        ] + [SimpleNamespace(choices=[])]

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk


class _FakeClient:
    def __init__(self, texts):
        self.requests: list[dict] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self._texts = texts

    async def _create(self, **kwargs):
        self.requests.append(kwargs)
        return _FakeStream(self._texts)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


def test_thread_to_messages_maps_roles_and_skips_empty_blocks():
    assert thread_to_messages(_thread()) == [
        {"role": "user", "content": "Hallo"},
        {"role": "assistant", "content": "Hello"},
        {"role": "user", "content": "Tschüss"},
    ]


@pytest.mark.asyncio
async def test_stream_sends_system_prompt_and_seed(settings_manager, monkeypatch):
    client = _FakeClient(["Bye", None, "!"])
    provider = ProviderOpenAI(instance_name="Work")
    monkeypatch.setattr(provider, "_client", lambda settings_manager: client)

    chunks = [c async for c in provider.stream_chat("gpt-4o", _thread(), settings_manager)]

    assert chunks == ["Bye", "!"]
    (request,) = client.requests
    assert request["model"] == "gpt-4o"
    assert request["stream"] is True
    assert request["seed"] == 1234
    assert request["messages"][0] == {"role": "system", "content": "Translate."}
    assert len(request["messages"]) == 4


@pytest.mark.asyncio
async def test_mistral_passes_seed_in_the_body(settings_manager, monkeypatch):
    client = _FakeClient(["ok"])
    provider = ProviderMistral(instance_name="EU")
    monkeypatch.setattr(provider, "_client", lambda settings_manager: client)

    assert [c async for c in provider.stream_chat("mistral-large", _thread(), settings_manager)] == ["ok"]
    assert client.requests[0]["extra_body"] == {"random_seed": 1234}
    assert "seed" not in client.requests[0]


@pytest.mark.asyncio
async def test_missing_api_key_ends_the_stream_and_logs(
    settings_manager, recording_logger, monkeypatch
):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    provider = ProviderOpenAI(recording_logger, "Nobody")

    chunks = [c async for c in provider.stream_chat("gpt-4o", _thread(), settings_manager)]

    assert chunks == []
    errors = [r for r in recording_logger.records if r[0] == "error"]
    assert len(errors) == 1
    assert errors[0][2]["error_code"] == "authentication_error"


def test_self_hosted_needs_no_api_key(settings_manager, monkeypatch):
    monkeypatch.delenv("SELF_HOSTED_API_KEY", raising=False)
    provider = ProviderSelfHosted(
        instance_name="Local",
        provider_settings=ProviderSettings(
            instance_name="Local",
            used_provider=LLMProviders.SELF_HOSTED,
            hostname="http://localhost:8080",
            host=Host.LLAMACPP,
        ),
    )
    client = provider._client(settings_manager)
    assert client.api_key == "not-needed"
    assert str(client.base_url) == "http://localhost:8080/v1/"


def test_self_hosted_requires_settings():
    with pytest.raises(ProviderConfigurationError):
        ProviderSelfHosted(instance_name="Local")


def test_openai_model_filter():
    provider = ProviderOpenAI()
    assert provider._is_text_model("gpt-4o")
    assert not provider._is_text_model("gpt-4o-realtime-preview")
    assert not provider._is_text_model("text-embedding-3-small")


def test_classify_openai_errors():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, request=request)
    exc = openai.RateLimitError("slow down", response=response, body=None)
    assert _classify_openai_error(exc)[0] == "rate_limit"

    timeout = openai.APITimeoutError(request=request)
    assert _classify_openai_error(timeout)[0] == "timeout"

    assert _classify_openai_error(ValueError("boom"))[0] == "unknown_error"


@pytest.mark.parametrize(
    "status,message,code",
    [
        (400, "maximum context length is 8192 tokens", "context_length_exceeded"),
        (400, "bad field", "bad_request"),
        (401, "nope", "authentication_error"),
        (403, "insufficient balance", "insufficient_balance"),
        (404, "no such model", "model_not_found"),
        (500, "oops", "api_error"),
    ],
)
def test_map_status_error(status, message, code):
    assert map_status_error(status, message).error_code == code


def test_map_connection_error_detects_timeouts():
    assert map_connection_error("Read timed out").error_code == "timeout"
    err = map_connection_error("peer closed connection")
    assert err.error_code == "connection_error"
    assert str(err) == "Connection error: peer closed connection"
