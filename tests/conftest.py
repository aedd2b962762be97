"""Pytest configuration and fixtures for all tests."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Iterable, List, Optional, Tuple

import pytest

from aistudio.core.chat import ChatThread
from aistudio.core.config import LLMProviders, ProviderSettings, SettingsManager
from aistudio.core.message_bus import MessageBus
from aistudio.core.providers.base import ProviderHandle
from aistudio.utils.rng import ThreadSafeRandom


class RecordingLogger:
    """Stands in for the global logger and keeps every record."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, dict]] = []

    def _record(self, level: str, message: str, *args: Any, **kwargs: Any) -> None:
        if args:
            message = message % args
        self.records.append((level, message, kwargs.get("extra") or {}))

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("debug", message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", message, *args, **kwargs)

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


class FakeProvider(ProviderHandle):
    """Streams a fixed list of chunks.

    With ``gate`` set, streaming pauses after ``pause_after`` chunks until the
    event is set; ``first_chunk_sent`` fires once the first chunk is out.
    """

    provider_id = LLMProviders.OPEN_AI

    def __init__(
        self,
        chunks: Iterable[str] = (),
        *,
        gate: Optional[asyncio.Event] = None,
        pause_after: int = 1,
        fail_after: Optional[int] = None,
        logger: Any = None,
    ) -> None:
        super().__init__(logger, "Fake")
        self.chunks = list(chunks)
        self.gate = gate
        self.pause_after = pause_after
        self.fail_after = fail_after
        self.first_chunk_sent = asyncio.Event()
        self.seen_threads: List[ChatThread] = []

    async def _stream_chat_impl(
        self,
        model: str,
        chat_thread: ChatThread,
        settings_manager: SettingsManager,
    ) -> AsyncIterator[str]:
        self.seen_threads.append(chat_thread.model_copy(deep=True))
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index == self.fail_after:
                raise ConnectionError("peer closed connection")
            if self.gate is not None and index == self.pause_after:
                await self.gate.wait()
            yield chunk
            self.first_chunk_sent.set()


@pytest.fixture
def settings_manager(tmp_path) -> SettingsManager:
    return SettingsManager(tmp_path / "settings.json")


@pytest.fixture
def openai_settings(settings_manager: SettingsManager) -> ProviderSettings:
    return settings_manager.add_provider(
        ProviderSettings(
            instance_name="Work",
            used_provider=LLMProviders.OPEN_AI,
            model="gpt-4o",
        )
    )


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def message_bus() -> MessageBus:
    return MessageBus()


@pytest.fixture
def rng() -> ThreadSafeRandom:
    return ThreadSafeRandom(seed=42)


@pytest.fixture
def use_provider(monkeypatch):
    """Make the assistants stream from the given handle instead of a vendor."""

    def install(provider: ProviderHandle) -> ProviderHandle:
        monkeypatch.setattr(
            "aistudio.core.assistants.base.create_provider",
            lambda provider_settings, logger=None: provider,
        )
        return provider

    return install
