"""Google Gemini provider handle."""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from aistudio.core.chat import ChatThread
from aistudio.core.config import LLMProviders, SettingsManager
from aistudio.core.providers.base import (
    STREAM_CHUNK_TIMEOUT,
    ProviderHandle,
    iter_with_timeout,
    thread_to_messages,
)
from aistudio.core.providers.error_mapping import (
    classify_generic_error,
    classify_mapped_error,
    map_status_error,
)
from aistudio.core.providers.errors import ProviderAuthenticationError


def _classify_gemini_error(exc: Exception) -> tuple[str, str]:
    """Classify a google-genai exception into error code and user-friendly message."""
    mapped = classify_mapped_error(exc)
    if mapped:
        return mapped
    if isinstance(exc, genai_errors.APIError):
        err = map_status_error(getattr(exc, "code", "unknown"), str(exc))
        return err.error_code, str(err)
    return classify_generic_error(exc)


def _to_genai_contents(messages: List[Dict[str, str]]) -> List[Any]:
    """Gemini names the assistant role "model"."""
    return [
        genai_types.Content(
            role="model" if message["role"] == "assistant" else "user",
            parts=[genai_types.Part(text=message["content"])],
        )
        for message in messages
    ]


class ProviderGoogle(ProviderHandle):
    provider_id = LLMProviders.GOOGLE

    def classify_error(self, exc: Exception) -> tuple[str, str]:
        return _classify_gemini_error(exc)

    def _client(self, settings_manager: SettingsManager) -> genai.Client:
        api_key = settings_manager.get_api_key(self.provider_id, self.instance_name)
        if not api_key:
            raise ProviderAuthenticationError(
                f"No API key configured for Google instance '{self.instance_name}'"
            )
        return genai.Client(api_key=api_key)

    async def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        contents = _to_genai_contents(thread_to_messages(chat_thread))
        self.logger.debug(
            "[gemini_client] Initiating stream request",
            extra={
                "instance_name": self.instance_name,
                "model": model,
                "num_messages": len(contents),
            },
        )
        client = self._client(settings_manager)
        config = genai_types.GenerateContentConfig(
            system_instruction=chat_thread.system_prompt or None,
            seed=chat_thread.seed,
        )
        stream = await client.aio.models.generate_content_stream(
            model=model, contents=contents, config=config
        )
        async for chunk in iter_with_timeout(stream, STREAM_CHUNK_TIMEOUT):
            text = getattr(chunk, "text", None)
            if text:
                yield text

    async def _list_text_models_impl(self, settings_manager: SettingsManager) -> List[str]:
        client = self._client(settings_manager)
        model_ids: List[str] = []
        async for model in await client.aio.models.list():
            actions = getattr(model, "supported_actions", None) or []
            name = getattr(model, "name", "") or ""
            if "generateContent" in actions and "embedding" not in name:
                model_ids.append(name.removeprefix("models/"))
        return sorted(model_ids)
