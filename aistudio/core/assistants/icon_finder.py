"""Icon finder assistant."""

from __future__ import annotations

from typing import Any, List, Optional

from aistudio.core.assistant_options import IconSources
from aistudio.core.assistants.base import AssistantBase
from aistudio.core.config import Components
from aistudio.core.message_bus import Event

SYSTEM_PROMPT = (
    "Finding icons for applications is usually challenging. Therefore, you help the user "
    "find icons. The user tells you the context, e.g., what the application does or "
    "what the icon should represent. You then suggest matching keywords to search for "
    "in icon libraries. Give at least three suggestions and explain each briefly. When "
    "the user names an icon source, your keywords match the naming of that source."
)


class IconFinderAssistant(AssistantBase):
    component = Components.ICON_FINDER_ASSISTANT

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.input_context = ""
        self.selected_icon_source = IconSources.GENERIC

    @property
    def title(self) -> str:
        return "Icon Finder"

    @property
    def description(self) -> str:
        return (
            "Finding the right icon for a context, such as for a piece of text, is not "
            "easy. The first challenge: You need to extract a concept from your context. "
            "The second challenge: You need to find a matching icon. This assistant "
            "helps with both."
        )

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def initialize(self) -> None:
        super().initialize()
        deferred = self.message_bus.check_deferred_messages(Event.SEND_TO_ICON_FINDER_ASSISTANT)
        if deferred and isinstance(deferred[0], str):
            self.input_context = deferred[0]

    def might_preselect_values(self) -> bool:
        data = self.settings_manager.configuration_data
        if not data.preselect_icon_options:
            return False
        self.selected_icon_source = data.preselected_icon_source
        self.provider_settings = next(
            (p for p in data.providers if p.id == data.preselected_icon_provider), None
        )
        return True

    def reset_form_fields(self) -> None:
        self.input_context = ""
        if not self.might_preselect_values():
            self.selected_icon_source = IconSources.GENERIC

    def validate_form_fields(self) -> List[str]:
        issue = self.validating_context(self.input_context)
        return [issue] if issue else []

    def validating_context(self, context: str) -> Optional[str]:
        if not context.strip():
            return "Please provide a context. This will help the AI to find the right icon."
        return None

    def build_request(self) -> str:
        if self.selected_icon_source == IconSources.GENERIC:
            source = "My icon source is generic."
        else:
            source = f"My icon source is: {self.selected_icon_source.to_name()}"
        return f"{source}\n\nMy context is:\n\n```\n{self.input_context}\n```"

    async def find_icon(self) -> Optional[str]:
        if not self.validate():
            return None
        self.create_chat_thread()
        time = self.add_user_request(self.build_request())
        return await self.add_ai_response(time)
