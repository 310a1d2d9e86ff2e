from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConversationState(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"


class SessionPhase(StrEnum):
    LOADING = "loading"
    READY = "ready"


class NotificationType(StrEnum):
    MATCH = "match"
    MESSAGE = "message"
    SYSTEM = "system"
    MODERATION = "moderation"


class FrameCommand(StrEnum):
    CONNECT = "CONNECT"
    CONNECTED = "CONNECTED"
    SUBSCRIBE = "SUBSCRIBE"
    UNSUBSCRIBE = "UNSUBSCRIBE"
    SEND = "SEND"
    MESSAGE = "MESSAGE"
    ERROR = "ERROR"
    DISCONNECT = "DISCONNECT"
