"""Tests for streaming provider output into chat content."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import FakeProvider
from aistudio.core.chat import ChatRole, ChatThread, ContentBlock, ContentText, NIL_UUID


def _thread() -> ChatThread:
    return ChatThread(system_prompt="Be brief.")


@pytest.mark.asyncio
async def test_chunks_are_appended_in_order(settings_manager):
    content = ContentText(initial_remote_wait=True)
    updates: list[str] = []

    await content.create_from_provider(
        FakeProvider(["Hi ", "there"]),
        settings_manager,
        "gpt-4o",
        _thread(),
        lambda: updates.append(content.text),
    )

    assert content.text == "Hi there"
    assert content.initial_remote_wait is False
    assert content.is_streaming is False
    assert updates == ["Hi ", "Hi there"]


@pytest.mark.asyncio
async def test_missing_thread_is_a_no_op(settings_manager):
    provider = FakeProvider(["ignored"])
    content = ContentText(initial_remote_wait=True)

    await content.create_from_provider(provider, settings_manager, "gpt-4o", None)

    assert content.text == ""
    assert content.initial_remote_wait is True
    assert provider.seen_threads == []


@pytest.mark.asyncio
async def test_empty_stream_keeps_waiting_flag(settings_manager):
    content = ContentText(initial_remote_wait=True)

    await content.create_from_provider(FakeProvider([]), settings_manager, "gpt-4o", _thread())

    assert content.text == ""
    assert content.initial_remote_wait is True
    assert content.is_streaming is False


@pytest.mark.asyncio
async def test_energy_saving_throttles_updates(settings_manager):
    with settings_manager.edit() as data:
        data.is_saving_energy = True
    content = ContentText()
    updates: list[str] = []

    await content.create_from_provider(
        FakeProvider(["a", "b", "c", "d"]),
        settings_manager,
        "gpt-4o",
        _thread(),
        lambda: updates.append(content.text),
    )

    assert content.text == "abcd"
    # All chunks arrive well within one refresh interval.
    assert updates == []


@pytest.mark.asyncio
async def test_failing_stream_keeps_partial_text(settings_manager, recording_logger):
    provider = FakeProvider(["partial", "never"], fail_after=1, logger=recording_logger)
    content = ContentText(initial_remote_wait=True)

    await content.create_from_provider(provider, settings_manager, "gpt-4o", _thread())

    assert content.text == "partial"
    assert content.is_streaming is False
    assert recording_logger.messages("error") == ["[providers] Streaming failed"]
    _, _, extra = [r for r in recording_logger.records if r[0] == "error"][0]
    assert extra["error_code"] == "connection_error"


def test_block_text_and_defaults():
    block = ContentBlock(
        time=datetime.now(timezone.utc),
        role=ChatRole.USER,
        content=ContentText(text="hello"),
    )
    assert block.text() == "hello"
    assert ContentBlock(time=datetime.now(timezone.utc)).text() == ""

    thread = ChatThread()
    assert thread.workspace_id == NIL_UUID
    assert thread.blocks == []
    assert thread.chat_id != ChatThread().chat_id
