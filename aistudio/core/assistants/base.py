"""Shared workflow for assistants that run one user→AI exchange.

An assistant builds a chat thread from the user's input, streams the
selected provider's answer into a new AI block and exposes the result for
copying or for sending to another workflow. Rendering is not handled here;
observers register a state listener and re-read the assistant's fields when
it fires.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol

from aistudio.core.chat import (
    ChatRole,
    ChatThread,
    ContentBlock,
    ContentText,
    ContentType,
    NIL_UUID,
    StateCallback,
)
from aistudio.core.config import Components, LLMProviders, ProviderSettings, SettingsManager
from aistudio.core.message_bus import MessageBus, SendTo, get_message_bus
from aistudio.core.providers import create_provider
from aistudio.utils.log import AIStudioLogger, get_logger
from aistudio.utils.rng import RandomSource, ThreadSafeRandom


class ChatThreadMissingError(RuntimeError):
    """A turn was added before ``create_chat_thread`` was called."""


class Clipboard(Protocol):
    def copy_text(self, text: str) -> None: ...


class Navigator(Protocol):
    def navigate_to(self, route: str) -> None: ...


class MemoryClipboard:
    """Clipboard that keeps the last copied text."""

    def __init__(self) -> None:
        self.text = ""

    def copy_text(self, text: str) -> None:
        self.text = text


class RouteRecorder:
    """Navigator that records requested routes instead of switching pages."""

    def __init__(self) -> None:
        self.routes: List[str] = []

    def navigate_to(self, route: str) -> None:
        self.routes.append(route)


@dataclass
class SendToButton:
    """A footer action that forwards content to another workflow.

    With ``use_resulting_content_block_data`` the AI result is sent; otherwise
    whatever ``get_text`` returns.
    """

    use_resulting_content_block_data: bool = True
    get_text: Callable[[], str] = lambda: ""


class AssistantBase(ABC):
    """Base class for assistant workflows."""

    component: Components = Components.NONE

    def __init__(
        self,
        settings_manager: SettingsManager,
        rng: Optional[RandomSource] = None,
        logger: Optional[AIStudioLogger] = None,
        clipboard: Optional[Clipboard] = None,
        navigator: Optional[Navigator] = None,
        message_bus: Optional[MessageBus] = None,
    ) -> None:
        self.settings_manager = settings_manager
        self.rng: RandomSource = rng or ThreadSafeRandom()
        self.logger = logger or get_logger()
        self.clipboard: Clipboard = clipboard or MemoryClipboard()
        self.navigator: Navigator = navigator or RouteRecorder()
        self.message_bus = message_bus or get_message_bus()

        self.provider_settings: Optional[ProviderSettings] = None
        self.input_is_valid = False
        self.input_issues: List[str] = []
        self.is_processing = False
        self.chat_thread: Optional[ChatThread] = None
        self.user_input_attributes: Dict[str, Any] = {}

        self._resulting_content_block: Optional[ContentBlock] = None
        self._state_listeners: List[StateCallback] = []

    # Workflow definition

    @property
    @abstractmethod
    def title(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def system_prompt(self) -> str: ...

    @abstractmethod
    def reset_form_fields(self) -> None:
        """Restore the workflow's own input fields to their defaults."""

    @abstractmethod
    def might_preselect_values(self) -> bool:
        """Apply preselected options from settings; True when any were applied."""

    def validate_form_fields(self) -> List[str]:
        """Issues with the workflow's own inputs."""
        return []

    # Lifecycle

    def initialize(self) -> None:
        """Prepare a freshly opened assistant."""
        self.settings_manager.inject_spellchecking(self.user_input_attributes)
        self.might_preselect_values()
        if self.provider_settings is None:
            self.provider_settings = self.settings_manager.get_preselected_provider(self.component)

    def add_state_listener(self, listener: StateCallback) -> None:
        self._state_listeners.append(listener)

    def remove_state_listener(self, listener: StateCallback) -> None:
        if listener in self._state_listeners:
            self._state_listeners.remove(listener)

    def state_has_changed(self) -> None:
        for listener in list(self._state_listeners):
            listener()

    # Validation

    def validating_provider(self, provider: Optional[ProviderSettings]) -> Optional[str]:
        if provider is None or provider.used_provider == LLMProviders.NONE:
            return "Please select a provider."
        return None

    def validate(self) -> bool:
        """Run all input checks and record the outcome."""
        issues = list(self.validate_form_fields())
        provider_issue = self.validating_provider(self.provider_settings)
        if provider_issue:
            issues.append(provider_issue)
        self.input_issues = issues
        self.input_is_valid = not issues
        return self.input_is_valid

    # Chat thread assembly

    def create_chat_thread(self) -> ChatThread:
        self.chat_thread = ChatThread(
            workspace_id=NIL_UUID,
            name="",
            seed=self.rng.next(),
            system_prompt=self.system_prompt,
            blocks=[],
        )
        return self.chat_thread

    def add_user_request(self, request: str) -> datetime:
        """Append the user's turn and return its timestamp."""
        if self.chat_thread is None:
            raise ChatThreadMissingError("create_chat_thread() must be called before adding turns")

        time = datetime.now().astimezone()
        self.chat_thread.blocks.append(
            ContentBlock(
                time=time,
                content_type=ContentType.TEXT,
                role=ChatRole.USER,
                content=ContentText(text=request),
            )
        )
        return time

    async def add_ai_response(self, time: datetime) -> str:
        """Append an AI block and stream the provider's answer into it.

        Returns the final text once the stream is finished.
        """
        chat_thread = self.chat_thread
        if chat_thread is None:
            raise ChatThreadMissingError("create_chat_thread() must be called before adding turns")

        # Waits for the remote until the first chunk arrives.
        ai_text = ContentText(initial_remote_wait=True)
        block = ContentBlock(
            time=time,
            content_type=ContentType.TEXT,
            role=ChatRole.AI,
            content=ai_text,
        )
        self._resulting_content_block = block
        chat_thread.blocks.append(block)
        self.is_processing = True
        self.state_has_changed()

        # After reset_form the exchange keeps streaming into its own block only.
        def is_current() -> bool:
            return self._resulting_content_block is block

        def on_update() -> None:
            if is_current():
                self.state_has_changed()

        provider = create_provider(self.provider_settings, self.logger)
        model = self.provider_settings.model if self.provider_settings else ""
        self.logger.debug(
            "[assistant] Streaming AI response",
            extra={
                "assistant": type(self).__name__,
                "provider": provider.provider_id.value,
                "instance_name": provider.instance_name,
                "chat_id": str(chat_thread.chat_id),
            },
        )
        try:
            await ai_text.create_from_provider(
                provider, self.settings_manager, model, chat_thread, on_update
            )
        finally:
            if is_current():
                self.is_processing = False
                self.state_has_changed()

        return ai_text.text

    # Result handling

    def result_to_copy(self) -> str:
        if self._resulting_content_block is None:
            return ""
        return self._resulting_content_block.text()

    def convert_to_chat_thread(self) -> ChatThread:
        return self.chat_thread or ChatThread()

    def copy_to_clipboard(self) -> None:
        self.clipboard.copy_text(self.result_to_copy())

    def send_to_assistant(self, destination: SendTo, button: SendToButton) -> None:
        """Hand the result to another workflow and navigate there."""
        if button.use_resulting_content_block_data:
            content_to_send = self.result_to_copy()
        else:
            content_to_send = button.get_text()

        send_to_data = destination.get_data()
        if destination == SendTo.CHAT:
            self.message_bus.defer_message(self, send_to_data.event, self.convert_to_chat_thread())
        else:
            self.message_bus.defer_message(self, send_to_data.event, content_to_send)

        self.navigator.navigate_to(send_to_data.route)

    def reset_form(self) -> None:
        """Discard the current exchange and all inputs.

        Safe while a response is streaming; the in-flight block is abandoned.
        """
        self._resulting_content_block = None
        self.chat_thread = None
        self.provider_settings = None
        self.is_processing = False

        self.reset_form_fields()

        self.input_is_valid = False
        self.input_issues = []
        self.state_has_changed()
