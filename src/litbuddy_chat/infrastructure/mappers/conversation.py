from __future__ import annotations

from typing import Any

from litbuddy_chat.application.dto.results import StatusResponse
from litbuddy_chat.domain.entities.conversation import ChatMeta, ConversationStatus
from litbuddy_chat.domain.events.message_pushed import MessagePushed
from litbuddy_chat.domain.events.status_changed import StatusChanged
from litbuddy_chat.domain.value_objects.enums import ConversationState
from litbuddy_chat.infrastructure.mappers.message import entity_id, parse_datetime, parse_message


def parse_state(raw: Any, default: ConversationState = ConversationState.ACTIVE) -> ConversationState:
    try:
        return ConversationState(raw)
    except ValueError:
        return default


def participant_ids(items: list[Any] | None) -> tuple[str, ...]:
    """Participants as plain ids; group chats nest them under ``user``."""
    ids: list[str] = []
    for item in items or []:
        if isinstance(item, dict) and "user" in item:
            item = item["user"]
        pid = entity_id(item)
        if pid:
            ids.append(pid)
    return tuple(ids)


def parse_status(raw: dict[str, Any]) -> ConversationStatus:
    return ConversationStatus(
        state=parse_state(raw.get("status")),
        paused_by=entity_id(raw.get("pausedBy")),
        paused_at=parse_datetime(raw.get("pausedAt")),
    )


def parse_meta(raw: dict[str, Any]) -> ChatMeta:
    return ChatMeta(
        status=parse_status(raw),
        participants=participant_ids(raw.get("participants")),
        name=str(raw.get("name") or ""),
    )


def parse_status_response(raw: Any) -> StatusResponse:
    if not isinstance(raw, dict):
        return StatusResponse(state=None)
    return StatusResponse(
        state=parse_state(raw["status"]) if raw.get("status") else None,
        paused_by=entity_id(raw.get("pausedBy")),
        paused_at=parse_datetime(raw.get("pausedAt")),
    )


def parse_status_event(payload: Any) -> StatusChanged | None:
    if not isinstance(payload, dict) or not payload.get("chatId"):
        return None
    return StatusChanged(
        chat_id=str(payload["chatId"]),
        state=parse_state(payload.get("status")),
        paused_by=entity_id(payload.get("pausedBy")),
        paused_at=parse_datetime(payload.get("pausedAt")),
        last_active=parse_datetime(payload.get("lastActive")),
    )


def parse_message_event(payload: Any) -> MessagePushed | None:
    if not isinstance(payload, dict) or not payload.get("chatId"):
        return None
    message = payload.get("message")
    if not isinstance(message, dict):
        return None
    return MessagePushed(chat_id=str(payload["chatId"]), message=parse_message(message))
