"""Tests for the translation assistant."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeProvider
from aistudio.core.assistant_options import CommonLanguages
from aistudio.core.assistants.translation import TranslationAssistant
from aistudio.core.chat import ChatRole
from aistudio.core.message_bus import Event


@pytest.fixture
def translator(settings_manager, rng, message_bus, openai_settings):
    with settings_manager.edit() as data:
        data.live_translation_debounce_interval_ms = 10
    assistant = TranslationAssistant(settings_manager, rng=rng, message_bus=message_bus)
    assistant.initialize()
    return assistant


def test_initial_state(translator, openai_settings):
    assert translator.title == "Translation"
    assert translator.selected_target_language == CommonLanguages.AS_IS
    assert translator.live_translation is False
    assert translator.provider_settings.id == openai_settings.id


def test_validation_messages(translator):
    assert translator.validate() is False
    assert translator.input_issues == [
        "Please provide a text as input. You might copy the desired text from a document or a website.",
        "Please select a target language.",
    ]

    translator.input_text = "Hallo"
    translator.selected_target_language = CommonLanguages.OTHER
    assert translator.validate() is False
    assert translator.input_issues == ["Please provide a custom language."]

    translator.custom_target_language = "Klingon"
    assert translator.validate() is True


def test_request_names_the_target_language(translator):
    translator.input_text = "Hallo Welt"
    translator.selected_target_language = CommonLanguages.EN_GB
    assert translator.build_request() == (
        f"{CommonLanguages.EN_GB.prompt_translation('')}\n\n```\nHallo Welt\n```"
    )

    translator.selected_target_language = CommonLanguages.OTHER
    translator.custom_target_language = "Klingon"
    assert translator.build_request().startswith("Translate the text in Klingon.")


@pytest.mark.asyncio
async def test_translate_text(translator, use_provider):
    provider = use_provider(FakeProvider(["Hello ", "world"]))
    translator.input_text = "Hallo Welt"
    translator.selected_target_language = CommonLanguages.EN_US

    assert await translator.translate_text(force=False) == "Hello world"
    assert translator.result_to_copy() == "Hello world"
    user_block, ai_block = translator.chat_thread.blocks
    assert user_block.role == ChatRole.USER
    assert "Hallo Welt" in user_block.text()
    assert translator.chat_thread.system_prompt == translator.system_prompt

    # Unchanged input is only translated again when forced.
    assert await translator.translate_text(force=False) is None
    assert len(provider.seen_threads) == 1
    assert await translator.translate_text(force=True) == "Hello world"
    assert len(provider.seen_threads) == 2


@pytest.mark.asyncio
async def test_invalid_input_is_not_sent(translator, use_provider):
    provider = use_provider(FakeProvider(["never"]))
    assert await translator.translate_text(force=True) is None
    assert provider.seen_threads == []
    assert translator.chat_thread is None


@pytest.mark.asyncio
async def test_live_translation_is_debounced(translator, use_provider):
    provider = use_provider(FakeProvider(["Hi"]))
    translator.live_translation = True
    translator.selected_target_language = CommonLanguages.EN_US

    translator.on_input_changed("H")
    translator.on_input_changed("Ha")
    translator.on_input_changed("Hallo")
    await asyncio.wait_for(translator.wait_for_live_translation(), timeout=5)

    (seen,) = provider.seen_threads
    assert "Hallo" in seen.blocks[0].text()
    assert translator.input_text_last_translation == "Hallo"


@pytest.mark.asyncio
async def test_input_changes_without_live_translation_do_nothing(translator, use_provider):
    provider = use_provider(FakeProvider(["Hi"]))
    translator.selected_target_language = CommonLanguages.EN_US

    translator.on_input_changed("Hallo")
    await translator.wait_for_live_translation()

    assert translator.input_text == "Hallo"
    assert provider.seen_threads == []


def test_preselected_options(settings_manager, message_bus, openai_settings):
    with settings_manager.edit() as data:
        data.preselect_translation_options = True
        data.preselect_live_translation = True
        data.preselected_translation_target_language = CommonLanguages.OTHER
        data.preselect_translation_other_language = "Esperanto"
        data.preselected_translation_provider = openai_settings.id

    assistant = TranslationAssistant(settings_manager, message_bus=message_bus)
    assistant.initialize()
    assert assistant.live_translation is True
    assert assistant.selected_target_language == CommonLanguages.OTHER
    assert assistant.custom_target_language == "Esperanto"
    assert assistant.provider_settings.id == openai_settings.id

    assistant.input_text = "text"
    assistant.reset_form()
    assert assistant.input_text == ""
    assert assistant.custom_target_language == "Esperanto"


def test_reset_without_preselection_restores_defaults(translator):
    translator.input_text = "text"
    translator.live_translation = True
    translator.selected_target_language = CommonLanguages.JA_JP

    translator.reset_form()

    assert translator.input_text == ""
    assert translator.live_translation is False
    assert translator.selected_target_language == CommonLanguages.AS_IS
    assert translator.provider_settings is None


def test_deferred_text_becomes_the_input(settings_manager, message_bus):
    message_bus.defer_message("icons", Event.SEND_TO_TRANSLATION_ASSISTANT, "Bonjour")
    assistant = TranslationAssistant(settings_manager, message_bus=message_bus)
    assistant.initialize()
    assert assistant.input_text == "Bonjour"
