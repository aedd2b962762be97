"""Tests for the icon finder assistant."""

from __future__ import annotations

import pytest

from conftest import FakeProvider
from aistudio.core.assistant_options import IconSources
from aistudio.core.assistants.icon_finder import IconFinderAssistant
from aistudio.core.message_bus import Event


@pytest.fixture
def icon_finder(settings_manager, rng, message_bus, openai_settings):
    assistant = IconFinderAssistant(settings_manager, rng=rng, message_bus=message_bus)
    assistant.initialize()
    return assistant


def test_context_is_required(icon_finder):
    assert icon_finder.validate() is False
    assert icon_finder.input_issues == [
        "Please provide a context. This will help the AI to find the right icon."
    ]


def test_request_names_the_icon_source(icon_finder):
    icon_finder.input_context = "A button that saves a document"
    assert icon_finder.build_request().startswith("My icon source is generic.")

    icon_finder.selected_icon_source = IconSources.FONT_AWESOME
    request = icon_finder.build_request()
    assert request.startswith("My icon source is: Font Awesome")
    assert request.endswith("```\nA button that saves a document\n```")


@pytest.mark.asyncio
async def test_find_icon(icon_finder, use_provider):
    provider = use_provider(FakeProvider(["floppy-disk, ", "save"]))
    icon_finder.input_context = "Save button"

    assert await icon_finder.find_icon() == "floppy-disk, save"
    (seen,) = provider.seen_threads
    assert seen.system_prompt == icon_finder.system_prompt
    assert "Save button" in seen.blocks[0].text()


def test_preselection_and_reset(settings_manager, message_bus, openai_settings):
    with settings_manager.edit() as data:
        data.preselect_icon_options = True
        data.preselected_icon_source = IconSources.MATERIAL
        data.preselected_icon_provider = openai_settings.id

    assistant = IconFinderAssistant(settings_manager, message_bus=message_bus)
    assistant.initialize()
    assert assistant.selected_icon_source == IconSources.MATERIAL

    with settings_manager.edit() as data:
        data.preselect_icon_options = False
    assistant.input_context = "Save"
    assistant.reset_form()
    assert assistant.input_context == ""
    assert assistant.selected_icon_source == IconSources.GENERIC


def test_deferred_text_becomes_the_context(settings_manager, message_bus):
    message_bus.defer_message("translation", Event.SEND_TO_ICON_FINDER_ASSISTANT, "Delete a file")
    assistant = IconFinderAssistant(settings_manager, message_bus=message_bus)
    assistant.initialize()
    assert assistant.input_context == "Delete a file"


def test_icon_source_urls():
    assert IconSources.GENERIC.url() == ""
    assert IconSources.MATERIAL.url().startswith("https://")
