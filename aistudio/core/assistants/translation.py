"""Translation assistant."""

from __future__ import annotations

from typing import Any, List, Optional

from aistudio.core.assistant_options import CommonLanguages
from aistudio.core.assistants.base import AssistantBase
from aistudio.core.config import Components
from aistudio.core.message_bus import Event
from aistudio.utils.debounce import Debouncer

SYSTEM_PROMPT = (
    "You get text in a source language as input. The user wants to get the text "
    "translated into a target language. Provide the translation in the requested "
    "language. Do not add any information. Correct any spelling or grammar mistakes. "
    "Do not ask for additional information. Do not mirror the user's language. Do not "
    "mirror the task. When the target language requires, e.g., shorter sentences, you "
    "should split the text into shorter sentences."
)


class TranslationAssistant(AssistantBase):
    component = Components.TRANSLATION_ASSISTANT

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.live_translation = False
        self.input_text = ""
        self.input_text_last_translation = ""
        self.selected_target_language = CommonLanguages.AS_IS
        self.custom_target_language = ""
        interval_ms = self.settings_manager.configuration_data.live_translation_debounce_interval_ms
        self._debouncer = Debouncer(max(interval_ms, 0) / 1000.0, self._translate_live)

    @property
    def title(self) -> str:
        return "Translation"

    @property
    def description(self) -> str:
        return (
            "Translate text from one language to another. Enable live translation to "
            "translate while you type."
        )

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def initialize(self) -> None:
        super().initialize()
        deferred = self.message_bus.check_deferred_messages(Event.SEND_TO_TRANSLATION_ASSISTANT)
        if deferred and isinstance(deferred[0], str):
            self.input_text = deferred[0]

    def might_preselect_values(self) -> bool:
        data = self.settings_manager.configuration_data
        if not data.preselect_translation_options:
            return False
        self.live_translation = data.preselect_live_translation
        self.selected_target_language = data.preselected_translation_target_language
        self.custom_target_language = data.preselect_translation_other_language
        self.provider_settings = next(
            (p for p in data.providers if p.id == data.preselected_translation_provider), None
        )
        return True

    def reset_form_fields(self) -> None:
        self._debouncer.cancel()
        self.input_text = ""
        self.input_text_last_translation = ""
        if not self.might_preselect_values():
            self.live_translation = False
            self.selected_target_language = CommonLanguages.AS_IS
            self.custom_target_language = ""

    def validate_form_fields(self) -> List[str]:
        issues = [
            issue
            for issue in (
                self.validating_text(self.input_text),
                self.validating_target_language(self.selected_target_language),
                self.validate_custom_language(self.custom_target_language),
            )
            if issue
        ]
        return issues

    def validating_text(self, text: str) -> Optional[str]:
        if not text.strip():
            return (
                "Please provide a text as input. You might copy the desired text from "
                "a document or a website."
            )
        return None

    def validating_target_language(self, language: CommonLanguages) -> Optional[str]:
        if language == CommonLanguages.AS_IS:
            return "Please select a target language."
        return None

    def validate_custom_language(self, language: str) -> Optional[str]:
        if self.selected_target_language == CommonLanguages.OTHER and not language.strip():
            return "Please provide a custom language."
        return None

    def build_request(self) -> str:
        instruction = self.selected_target_language.prompt_translation(self.custom_target_language)
        return f"{instruction}\n\n```\n{self.input_text}\n```"

    async def translate_text(self, force: bool) -> Optional[str]:
        """Translate the input; without ``force`` an unchanged input is skipped."""
        if not self.validate():
            return None
        if not force and self.input_text == self.input_text_last_translation:
            return None

        self.input_text_last_translation = self.input_text
        self.create_chat_thread()
        time = self.add_user_request(self.build_request())
        return await self.add_ai_response(time)

    def on_input_changed(self, text: str) -> None:
        """Record new input; schedules a translation when live translation is on."""
        self.input_text = text
        if self.live_translation:
            self._debouncer.trigger()

    async def wait_for_live_translation(self) -> None:
        await self._debouncer.wait()

    async def _translate_live(self) -> None:
        await self.translate_text(force=False)
