"""Shared abstractions for provider handles."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional

from aistudio.core.chat import ChatRole, ChatThread, ContentType
from aistudio.core.config import LLMProviders, SettingsManager
from aistudio.core.providers.error_mapping import classify_generic_error
from aistudio.utils.log import AIStudioLogger, get_logger

# Seconds to wait for the next chunk of a streamed answer.
STREAM_CHUNK_TIMEOUT = 120.0


def thread_to_messages(chat_thread: ChatThread) -> List[Dict[str, str]]:
    """Convert the text blocks of a thread into role/content messages.

    Blocks without text (e.g. the AI block still waiting for its stream) are
    skipped. The system prompt is not included.
    """
    messages: List[Dict[str, str]] = []
    for block in chat_thread.blocks:
        if block.content_type != ContentType.TEXT:
            continue
        text = block.text()
        if not text.strip():
            continue
        if block.role == ChatRole.USER:
            role = "user"
        elif block.role == ChatRole.AI:
            role = "assistant"
        else:
            continue
        messages.append({"role": role, "content": text})
    return messages


async def iter_with_timeout(stream: AsyncIterable[Any], timeout: Optional[float]) -> AsyncIterator[Any]:
    """Yield items from an async iterable, enforcing a per-item timeout if provided."""
    if timeout is None or timeout <= 0:
        async for item in stream:
            yield item
        return

    aiter = stream.__aiter__()
    while True:
        try:
            yield await asyncio.wait_for(aiter.__anext__(), timeout=timeout)
        except StopAsyncIteration:
            break


class ProviderHandle(ABC):
    """A configured LLM provider able to stream chat completions."""

    provider_id: LLMProviders = LLMProviders.NONE

    def __init__(self, logger: Optional[AIStudioLogger] = None, instance_name: str = "") -> None:
        self.logger = logger or get_logger()
        self.instance_name = instance_name

    async def stream_chat(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        """Stream the answer to ``chat_thread`` chunk by chunk.

        Provider failures are logged and end the stream early; they are not
        raised to the caller.
        """
        start_time = time.time()
        try:
            async for chunk in self._stream_chat_impl(model, chat_thread, settings_manager):
                if chunk:
                    yield chunk
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error_code, error_message = self.classify_error(exc)
            self.logger.error(
                "[providers] Streaming failed",
                extra={
                    "provider": self.provider_id.value,
                    "instance_name": self.instance_name,
                    "model": model,
                    "error_code": error_code,
                    "error_message": error_message,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
            )

    async def list_text_models(self, settings_manager: SettingsManager) -> List[str]:
        """Model ids usable for chat; empty when the vendor cannot be queried."""
        try:
            return await self._list_text_models_impl(settings_manager)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error_code, error_message = self.classify_error(exc)
            self.logger.warning(
                "[providers] Failed to list models",
                extra={
                    "provider": self.provider_id.value,
                    "instance_name": self.instance_name,
                    "error_code": error_code,
                    "error_message": error_message,
                },
            )
            return []

    def classify_error(self, exc: Exception) -> tuple[str, str]:
        """Classify an exception into error code and user-friendly message."""
        return classify_generic_error(exc)

    @abstractmethod
    def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        """Vendor-specific streaming; may raise."""

    async def _list_text_models_impl(self, settings_manager: SettingsManager) -> List[str]:
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(instance_name={self.instance_name!r})"


class NoProvider(ProviderHandle):
    """Stands in when no provider is selected or the configured one is broken."""

    provider_id = LLMProviders.NONE

    def __init__(self, logger: Optional[AIStudioLogger] = None, instance_name: str = "None") -> None:
        super().__init__(logger, instance_name)

    async def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        self.logger.debug("[providers] No provider selected; nothing to stream")
        return
        yield  # pragma: no cover
