"""In-process message routing between workflows.

Workflows hand results to each other through the bus: a sender either
delivers a message to currently registered receivers, or defers it so the
destination can pick it up once it is opened.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Dict, Iterable, List, Optional, Protocol, Set

from aistudio.utils.log import get_logger

logger = get_logger()


class Event(str, Enum):
    NONE = "none"
    STATE_HAS_CHANGED = "state_has_changed"
    CONFIGURATION_CHANGED = "configuration_changed"
    SEND_TO_CHAT = "send_to_chat"
    SEND_TO_TRANSLATION_ASSISTANT = "send_to_translation_assistant"
    SEND_TO_ICON_FINDER_ASSISTANT = "send_to_icon_finder_assistant"


@dataclass(frozen=True)
class SendToData:
    event: Event
    route: str


class SendTo(str, Enum):
    """Destinations a workflow can send its result to."""

    NONE = "none"
    CHAT = "chat"
    TRANSLATION_ASSISTANT = "translation_assistant"
    ICON_FINDER_ASSISTANT = "icon_finder_assistant"

    def get_data(self) -> SendToData:
        return _SEND_TO_DATA.get(self, SendToData(Event.NONE, "/"))

    def to_name(self) -> str:
        return self.value.replace("_", " ").title()


_SEND_TO_DATA = {
    SendTo.CHAT: SendToData(Event.SEND_TO_CHAT, "/chat"),
    SendTo.TRANSLATION_ASSISTANT: SendToData(
        Event.SEND_TO_TRANSLATION_ASSISTANT, "/assistant/translation"
    ),
    SendTo.ICON_FINDER_ASSISTANT: SendToData(
        Event.SEND_TO_ICON_FINDER_ASSISTANT, "/assistant/icons"
    ),
}


class MessageReceiver(Protocol):
    def process_message(self, sender: Any, event: Event, data: Any) -> None: ...


@dataclass
class DeferredMessage:
    sender: Any
    event: Event
    data: Any


class MessageBus:
    """Thread-safe registry of receivers plus per-event deferred queues."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._receivers: Dict[int, tuple[MessageReceiver, Set[Event]]] = {}
        self._deferred: Dict[Event, Deque[DeferredMessage]] = {}

    def register_component(self, receiver: MessageReceiver, events: Iterable[Event]) -> None:
        with self._lock:
            self._receivers[id(receiver)] = (receiver, set(events))

    def unregister_component(self, receiver: MessageReceiver) -> None:
        with self._lock:
            self._receivers.pop(id(receiver), None)

    def send_message(self, sender: Any, event: Event, data: Any = None) -> int:
        """Deliver to every receiver subscribed to ``event``; returns the count."""
        with self._lock:
            targets = [
                receiver
                for receiver, events in self._receivers.values()
                if event in events and receiver is not sender
            ]
        for receiver in targets:
            receiver.process_message(sender, event, data)
        return len(targets)

    def defer_message(self, sender: Any, event: Event, data: Any) -> None:
        with self._lock:
            self._deferred.setdefault(event, deque()).append(DeferredMessage(sender, event, data))
        logger.debug(
            "[message_bus] Deferred message",
            extra={"event": event.value, "sender": type(sender).__name__},
        )

    def check_deferred_messages(self, event: Event) -> List[Any]:
        """Drain and return the data of all deferred messages for ``event`` in FIFO order."""
        with self._lock:
            queue = self._deferred.pop(event, None)
        if not queue:
            return []
        return [message.data for message in queue]

    def has_deferred_messages(self, event: Event) -> bool:
        with self._lock:
            return bool(self._deferred.get(event))


_message_bus: Optional[MessageBus] = None


def get_message_bus() -> MessageBus:
    """Get the process-wide message bus."""
    global _message_bus
    if _message_bus is None:
        _message_bus = MessageBus()
    return _message_bus
