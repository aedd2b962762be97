"""Providers speaking the OpenAI chat-completions protocol.

OpenAI, Mistral, Groq, Fireworks and self-hosted servers (LM Studio,
llama.cpp, ollama) all expose an OpenAI-compatible endpoint, so they share
one streaming implementation and differ in base URL, request extras and
model filtering.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional, cast

import httpx
import openai
from openai import AsyncOpenAI

from aistudio.core.chat import ChatThread
from aistudio.core.config import Host, LLMProviders, ProviderSettings, SettingsManager
from aistudio.core.providers.base import (
    STREAM_CHUNK_TIMEOUT,
    ProviderHandle,
    iter_with_timeout,
    thread_to_messages,
)
from aistudio.core.providers.error_mapping import (
    classify_generic_error,
    classify_mapped_error,
    map_bad_request_error,
    map_connection_error,
    map_permission_denied_error,
    map_status_error,
)
from aistudio.core.providers.errors import (
    ProviderAuthenticationError,
    ProviderConfigurationError,
    ProviderModelNotFoundError,
    ProviderRateLimitError,
)
from aistudio.utils.log import AIStudioLogger

# Placeholder for servers that ignore authentication; the SDK insists on a key.
_UNUSED_API_KEY = "not-needed"


def _classify_openai_error(exc: Exception) -> tuple[str, str]:
    """Classify an OpenAI SDK exception into error code and user-friendly message."""
    mapped = classify_mapped_error(exc)
    if mapped:
        return mapped

    exc_msg = str(exc)
    if isinstance(exc, openai.AuthenticationError):
        return "authentication_error", f"Authentication failed: {exc_msg}"
    if isinstance(exc, openai.PermissionDeniedError):
        err = map_permission_denied_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, openai.NotFoundError):
        err = ProviderModelNotFoundError(f"Model not found: {exc_msg}")
        return err.error_code, str(err)
    if isinstance(exc, openai.BadRequestError):
        err = map_bad_request_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, openai.RateLimitError):
        err = ProviderRateLimitError(f"Rate limit exceeded: {exc_msg}")
        return err.error_code, str(err)
    if isinstance(exc, openai.APITimeoutError):
        return "timeout", f"Request timed out: {exc_msg}"
    if isinstance(exc, openai.APIConnectionError):
        err = map_connection_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, openai.APIStatusError):
        err = map_status_error(getattr(exc, "status_code", "unknown"), exc_msg)
        return err.error_code, str(err)
    return classify_generic_error(exc)


class OpenAICompatibleProvider(ProviderHandle):
    """Streaming chat completions against an OpenAI-compatible endpoint."""

    base_url: str = ""
    requires_api_key: bool = True

    def classify_error(self, exc: Exception) -> tuple[str, str]:
        return _classify_openai_error(exc)

    def _client(self, settings_manager: SettingsManager) -> AsyncOpenAI:
        api_key = settings_manager.get_api_key(self.provider_id, self.instance_name)
        if not api_key:
            if self.requires_api_key:
                raise ProviderAuthenticationError(
                    f"No API key configured for {self.provider_id.to_name()} "
                    f"instance '{self.instance_name}'"
                )
            api_key = _UNUSED_API_KEY
        return AsyncOpenAI(api_key=api_key, base_url=self.base_url)

    def _request_extras(self, chat_thread: ChatThread) -> Dict[str, Any]:
        """Vendor-specific keyword arguments for the completion request."""
        return {}

    def _is_text_model(self, model_id: str) -> bool:
        return True

    async def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": chat_thread.system_prompt}
        ] + thread_to_messages(chat_thread)

        self.logger.debug(
            "[openai_client] Initiating stream request",
            extra={
                "provider": self.provider_id.value,
                "instance_name": self.instance_name,
                "model": model,
                "num_messages": len(messages),
            },
        )
        async with self._client(settings_manager) as client:
            stream = await client.chat.completions.create(  # type: ignore[call-overload]
                model=model,
                messages=cast(Any, messages),
                stream=True,
                **self._request_extras(chat_thread),
            )
            async for chunk in iter_with_timeout(stream, STREAM_CHUNK_TIMEOUT):
                choices = getattr(chunk, "choices", None)
                if not choices:
                    continue
                delta = getattr(choices[0], "delta", None)
                text = getattr(delta, "content", None) if delta else None
                if text:
                    yield text

    async def _list_text_models_impl(self, settings_manager: SettingsManager) -> List[str]:
        model_ids: List[str] = []
        async with self._client(settings_manager) as client:
            async for model in client.models.list():
                if self._is_text_model(model.id):
                    model_ids.append(model.id)
        return sorted(model_ids)


class ProviderOpenAI(OpenAICompatibleProvider):
    provider_id = LLMProviders.OPEN_AI
    base_url = "https://api.openai.com/v1/"

    def _request_extras(self, chat_thread: ChatThread) -> Dict[str, Any]:
        return {"seed": chat_thread.seed}

    def _is_text_model(self, model_id: str) -> bool:
        return model_id.startswith(("gpt-", "chatgpt-", "o1", "o3", "o4")) and (
            "audio" not in model_id and "realtime" not in model_id
        )


class ProviderMistral(OpenAICompatibleProvider):
    provider_id = LLMProviders.MISTRAL
    base_url = "https://api.mistral.ai/v1/"

    def _request_extras(self, chat_thread: ChatThread) -> Dict[str, Any]:
        return {"extra_body": {"random_seed": chat_thread.seed}}

    def _is_text_model(self, model_id: str) -> bool:
        return "embed" not in model_id


class ProviderGroq(OpenAICompatibleProvider):
    provider_id = LLMProviders.GROQ
    base_url = "https://api.groq.com/openai/v1/"

    def _request_extras(self, chat_thread: ChatThread) -> Dict[str, Any]:
        return {"seed": chat_thread.seed}

    def _is_text_model(self, model_id: str) -> bool:
        return "whisper" not in model_id


class ProviderFireworks(OpenAICompatibleProvider):
    provider_id = LLMProviders.FIREWORKS
    base_url = "https://api.fireworks.ai/inference/v1/"


class ProviderSelfHosted(OpenAICompatibleProvider):
    """A local inference server reachable at a user-configured hostname."""

    provider_id = LLMProviders.SELF_HOSTED
    requires_api_key = False

    def __init__(
        self,
        logger: Optional[AIStudioLogger] = None,
        instance_name: str = "",
        provider_settings: Optional[ProviderSettings] = None,
    ) -> None:
        super().__init__(logger, instance_name)
        if provider_settings is None:
            raise ProviderConfigurationError("Self-hosted providers need their settings")
        self.host = provider_settings.host
        self.base_url = self._build_base_url(provider_settings.hostname, provider_settings.host)

    @staticmethod
    def _build_base_url(hostname: str, host: Host) -> str:
        if host == Host.NONE:
            raise ProviderConfigurationError("No self-hosted host kind selected")
        try:
            url = httpx.URL(hostname.strip())
        except (httpx.InvalidURL, TypeError) as exc:
            raise ProviderConfigurationError(f"Invalid hostname '{hostname}': {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ProviderConfigurationError(
                f"Invalid hostname '{hostname}': expected an absolute http(s) URL"
            )
        return str(url).rstrip("/") + host.base_path()
