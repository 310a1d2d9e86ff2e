"""Tagged results produced by the REST response parser."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from litbuddy_chat.domain.entities.conversation import ChatMeta
from litbuddy_chat.domain.entities.message import Message
from litbuddy_chat.domain.value_objects.enums import ConversationState


@dataclass(frozen=True, slots=True)
class ChatHistory:
    messages: tuple[Message, ...]
    meta: ChatMeta | None


@dataclass(frozen=True, slots=True)
class FullHistory:
    """The server answered a send with the whole message list."""

    messages: tuple[Message, ...]


@dataclass(frozen=True, slots=True)
class SingleMessage:
    message: Message


@dataclass(frozen=True, slots=True)
class NoMessage:
    pass


SendResult = FullHistory | SingleMessage | NoMessage


@dataclass(frozen=True, slots=True)
class StatusResponse:
    state: ConversationState | None
    paused_by: str | None = None
    paused_at: datetime | None = None
