"""Tagged parsing of loosely shaped REST responses.

The backend answers the same call with different envelopes depending on the
route and version. Each helper here applies one fixed fallback order so call
sites never sniff shapes themselves:

* message lists:      array, ``messages``, ``data``, empty
* send results:       ``messages`` array (full), ``message`` object (single), nothing
* chat metadata:      ``chatMeta``, ``meta``, top-level status fields, none
* chat lists:         array, ``chats``, empty
* notification lists: array, ``notifications``, ``data``, empty
"""
from __future__ import annotations

from typing import Any

from litbuddy_chat.application.dto.results import (
    ChatHistory,
    FullHistory,
    NoMessage,
    SendResult,
    SingleMessage,
)
from litbuddy_chat.domain.entities.conversation import ChatMeta
from litbuddy_chat.domain.entities.message import Message
from litbuddy_chat.domain.entities.notification import Notification
from litbuddy_chat.infrastructure.mappers.conversation import parse_meta
from litbuddy_chat.infrastructure.mappers.message import parse_message, parse_messages
from litbuddy_chat.infrastructure.mappers.notification import parse_notification

_META_FIELDS = ("status", "participants", "name", "pausedBy", "pausedAt")


def _first_list(data: Any, *keys: str) -> list[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


def message_list(data: Any) -> tuple[Message, ...]:
    return parse_messages(_first_list(data, "messages", "data"))


def chat_meta(data: Any) -> ChatMeta | None:
    if not isinstance(data, dict):
        return None
    for key in ("chatMeta", "meta"):
        if isinstance(data.get(key), dict):
            return parse_meta(data[key])
    if any(field in data for field in _META_FIELDS):
        return parse_meta(data)
    return None


def chat_history(data: Any) -> ChatHistory:
    return ChatHistory(messages=message_list(data), meta=chat_meta(data))


def send_result(data: Any) -> SendResult:
    if isinstance(data, dict):
        if isinstance(data.get("messages"), list):
            return FullHistory(messages=parse_messages(data["messages"]))
        if isinstance(data.get("message"), dict):
            return SingleMessage(message=parse_message(data["message"]))
    return NoMessage()


def chat_list(data: Any) -> list[dict[str, Any]]:
    return [c for c in _first_list(data, "chats") if isinstance(c, dict)]


def notification_list(data: Any) -> list[Notification]:
    return [
        parse_notification(n)
        for n in _first_list(data, "notifications", "data")
        if isinstance(n, dict)
    ]
