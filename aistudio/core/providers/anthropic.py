"""Anthropic provider handle."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, List

import anthropic
from anthropic import AsyncAnthropic

from aistudio.core.chat import ChatThread
from aistudio.core.config import LLMProviders, SettingsManager
from aistudio.core.providers.base import ProviderHandle, thread_to_messages
from aistudio.core.providers.error_mapping import (
    classify_generic_error,
    classify_mapped_error,
    map_bad_request_error,
    map_connection_error,
    map_permission_denied_error,
)
from aistudio.core.providers.errors import ProviderAuthenticationError

MAX_OUTPUT_TOKENS = 4096


def _classify_anthropic_error(exc: Exception) -> tuple[str, str]:
    """Classify an Anthropic exception into error code and user-friendly message."""
    mapped = classify_mapped_error(exc)
    if mapped:
        return mapped

    exc_msg = str(exc)
    if isinstance(exc, anthropic.AuthenticationError):
        return "authentication_error", f"Authentication failed: {exc_msg}"
    if isinstance(exc, anthropic.PermissionDeniedError):
        err = map_permission_denied_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, anthropic.NotFoundError):
        return "model_not_found", f"Model not found: {exc_msg}"
    if isinstance(exc, anthropic.BadRequestError):
        err = map_bad_request_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, anthropic.RateLimitError):
        return "rate_limit", f"Rate limit exceeded: {exc_msg}"
    if isinstance(exc, anthropic.APIConnectionError):
        err = map_connection_error(exc_msg)
        return err.error_code, str(err)
    if isinstance(exc, anthropic.APIStatusError):
        status = getattr(exc, "status_code", "unknown")
        return "api_error", f"API error ({status}): {exc_msg}"
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout", f"Request timed out: {exc_msg}"
    return classify_generic_error(exc)


class ProviderAnthropic(ProviderHandle):
    provider_id = LLMProviders.ANTHROPIC

    def classify_error(self, exc: Exception) -> tuple[str, str]:
        return _classify_anthropic_error(exc)

    def _client(self, settings_manager: SettingsManager) -> AsyncAnthropic:
        api_key = settings_manager.get_api_key(self.provider_id, self.instance_name)
        if not api_key:
            raise ProviderAuthenticationError(
                f"No API key configured for Anthropic instance '{self.instance_name}'"
            )
        return AsyncAnthropic(api_key=api_key)

    async def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        messages = thread_to_messages(chat_thread)
        self.logger.debug(
            "[anthropic_client] Initiating stream request",
            extra={
                "instance_name": self.instance_name,
                "model": model,
                "num_messages": len(messages),
            },
        )
        async with self._client(settings_manager) as client:
            async with client.messages.stream(
                model=model,
                system=chat_thread.system_prompt,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=MAX_OUTPUT_TOKENS,
            ) as stream:
                async for text in stream.text_stream:
                    yield text

    async def _list_text_models_impl(self, settings_manager: SettingsManager) -> List[str]:
        async with self._client(settings_manager) as client:
            model_ids = [model.id async for model in client.models.list()]
        return sorted(model_ids)
