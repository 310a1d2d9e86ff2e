from __future__ import annotations

import itertools
from datetime import datetime

from litbuddy_chat.application.dto.results import FullHistory, SendResult, SingleMessage
from litbuddy_chat.application.ports.clock import epoch_ms
from litbuddy_chat.domain.entities.message import Message, Sender
from litbuddy_chat.domain.value_objects.ids import TEMP_ID_PREFIX, is_temporary


class MessageTimeline:
    """Displayed message list, in arrival order.

    Optimistic entries carry a ``temp-`` id until the server's copy replaces
    them. Durable ids are unique: the same message pushed on both the topic
    and the personal queue, or pushed before the send response, shows once.
    """

    def __init__(self, messages: tuple[Message, ...] = ()) -> None:
        self._messages: list[Message] = list(messages)
        self._temp_seq = itertools.count(1)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def replace_all(self, messages: tuple[Message, ...]) -> None:
        self._messages = list(messages)

    def append(self, message: Message) -> bool:
        if message.id and not is_temporary(message.id) and self._contains(message.id):
            return False
        self._messages.append(message)
        return True

    def add_optimistic(self, text: str, sender: Sender, now: datetime) -> Message:
        message = Message(
            id=f"{TEMP_ID_PREFIX}{epoch_ms(now)}-{next(self._temp_seq)}",
            text=text,
            sender=sender,
            timestamp=now,
            optimistic=True,
        )
        self._messages.append(message)
        return message

    def reconcile(self, result: SendResult) -> None:
        if isinstance(result, FullHistory):
            self.replace_all(result.messages)
        elif isinstance(result, SingleMessage):
            self._messages = [m for m in self._messages if not is_temporary(m.id)]
            self.append(result.message)

    def rollback_optimistic(self) -> None:
        self._messages = [m for m in self._messages if not m.optimistic]

    def _contains(self, message_id: str) -> bool:
        return any(m.id == message_id for m in self._messages)
