"""Broker frame envelope.

The backend broker speaks STOMP commands, but every frame travels as one
JSON object per WebSocket text message::

    {"command": "MESSAGE", "headers": {"destination": "..."}, "body": "<json>"}
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from litbuddy_chat.domain.value_objects.enums import FrameCommand
from litbuddy_chat.infrastructure.bus.serializer import serialize_body

STOMP_VERSION = "1.2"


class StompFrame(BaseModel):
    command: str
    headers: dict[str, Any] = {}
    body: str | None = None

    @property
    def destination(self) -> str | None:
        value = self.headers.get("destination")
        return str(value) if value is not None else None

    @property
    def subscription(self) -> str | None:
        value = self.headers.get("subscription")
        return str(value) if value is not None else None


def connect_frame() -> StompFrame:
    return StompFrame(
        command=FrameCommand.CONNECT.value,
        headers={"accept-version": STOMP_VERSION, "heart-beat": "0,0"},
    )


def subscribe_frame(subscription_id: str, destination: str) -> StompFrame:
    return StompFrame(
        command=FrameCommand.SUBSCRIBE.value,
        headers={"id": subscription_id, "destination": destination},
    )


def unsubscribe_frame(subscription_id: str, destination: str) -> StompFrame:
    return StompFrame(
        command=FrameCommand.UNSUBSCRIBE.value,
        headers={"id": subscription_id, "destination": destination},
    )


def send_frame(destination: str, payload: Any) -> StompFrame:
    return StompFrame(
        command=FrameCommand.SEND.value,
        headers={"destination": destination, "content-type": "application/json"},
        body=serialize_body(payload),
    )


def disconnect_frame() -> StompFrame:
    return StompFrame(command=FrameCommand.DISCONNECT.value)
