"""Chat thread data model.

A ``ChatThread`` is an ordered list of ``ContentBlock`` objects. During one
exchange blocks are only appended, and at most one AI block is waiting for
its provider stream to finish.
"""

from __future__ import annotations

import time
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Literal, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from aistudio.utils.log import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from aistudio.core.config import SettingsManager
    from aistudio.core.providers.base import ProviderHandle

logger = get_logger()

StateCallback = Callable[[], None]

# Minimum seconds between UI refreshes while streaming in energy-saving mode.
ENERGY_SAVING_UPDATE_INTERVAL = 3.0

NIL_UUID = UUID(int=0)


class ChatRole(str, Enum):
    NONE = "none"
    SYSTEM = "system"
    USER = "user"
    AI = "ai"


class ContentType(str, Enum):
    NONE = "none"
    TEXT = "text"


class ContentText(BaseModel):
    """Text content, filled incrementally when it comes from a provider."""

    type: Literal["text"] = "text"
    text: str = ""
    # True until the first chunk of the remote stream arrived.
    initial_remote_wait: bool = False
    is_streaming: bool = False

    async def create_from_provider(
        self,
        provider: "ProviderHandle",
        settings_manager: "SettingsManager",
        model: str,
        chat_thread: Optional["ChatThread"],
        on_update: Optional[StateCallback] = None,
    ) -> None:
        """Stream the provider's answer for ``chat_thread`` into this content.

        Returns once the provider stream is exhausted.
        """
        if chat_thread is None:
            return

        saving_energy = settings_manager.configuration_data.is_saving_energy
        last_update = time.monotonic()
        self.is_streaming = True
        try:
            async for chunk in provider.stream_chat(model, chat_thread, settings_manager):
                if self.initial_remote_wait:
                    self.initial_remote_wait = False
                self.text += chunk

                if on_update is None:
                    continue
                now = time.monotonic()
                if not saving_energy or now - last_update >= ENERGY_SAVING_UPDATE_INTERVAL:
                    last_update = now
                    on_update()
        finally:
            self.is_streaming = False
            logger.debug(
                "[chat] Provider stream finished",
                extra={
                    "provider": provider.provider_id.value,
                    "instance_name": provider.instance_name,
                    "chars": len(self.text),
                },
            )


class ContentBlock(BaseModel):
    time: datetime
    content_type: ContentType = ContentType.TEXT
    role: ChatRole = ChatRole.NONE
    content: Optional[ContentText] = None

    def text(self) -> str:
        if isinstance(self.content, ContentText):
            return self.content.text
        return ""


class ChatThread(BaseModel):
    """A conversation sent to a provider as a whole."""

    workspace_id: UUID = NIL_UUID
    chat_id: UUID = Field(default_factory=uuid4)
    name: str = ""
    seed: int = 0
    system_prompt: str = ""
    blocks: List[ContentBlock] = Field(default_factory=list)
