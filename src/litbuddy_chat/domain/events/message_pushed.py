from __future__ import annotations

from dataclasses import dataclass

from litbuddy_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessagePushed:
    chat_id: str
    message: Message
