"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.dto.results import (
    ChatHistory,
    NoMessage,
    SendResult,
    StatusResponse,
)
from litbuddy_chat.application.exceptions import AppError
from litbuddy_chat.config import Settings
from litbuddy_chat.domain.entities.conversation import ChatMeta
from litbuddy_chat.domain.entities.group_chat import GroupChat
from litbuddy_chat.domain.entities.message import Message, Sender
from litbuddy_chat.domain.entities.notification import Notification
from litbuddy_chat.domain.entities.subscription import PushHandler, Subscription
from litbuddy_chat.domain.value_objects.enums import NotificationType

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        BACKEND_URL="http://test/api",
        RECONNECT_DELAY_SECONDS=0.01,
        SCROLL_DEBOUNCE_SECONDS=0.01,
        HISTORY_TIMEOUT_SECONDS=2,
        REQUEST_TIMEOUT_SECONDS=2,
    )


@pytest.fixture
def me() -> Principal:
    return Principal(user_id="userA", display_name="Ann")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_message(
    message_id: str = "m1",
    text: str = "hello",
    *,
    sender_id: str | None = "userB",
    sender_name: str = "Bob",
    at: datetime | None = None,
) -> Message:
    return Message(
        id=message_id,
        text=text,
        sender=Sender(id=sender_id, name=sender_name),
        timestamp=at or T0,
    )


def message_payload(
    message_id: str = "m1",
    text: str = "hello",
    *,
    sender_id: str = "userB",
    sender_name: str = "Bob",
) -> dict[str, Any]:
    return {
        "_id": message_id,
        "text": text,
        "sender": {"_id": sender_id, "displayName": sender_name},
        "timestamp": "2024-01-01T00:00:00Z",
    }


def make_notification(notification_id: str = "n1", *, read: bool = False) -> Notification:
    return Notification(
        id=notification_id,
        type=NotificationType.MATCH,
        title="New match",
        body="You matched with Bob",
        created_at=T0,
        read=read,
    )


async def eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Poll until ``predicate`` holds; the loop gets to run background tasks meanwhile."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.001)


@dataclass
class FakeClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


@dataclass
class FakeBus:
    """In-memory PushBus: tests deliver pushes with ``push``."""
    ready: bool = True
    handlers: dict[str, PushHandler] = field(default_factory=dict)
    subscriptions: dict[str, Subscription] = field(default_factory=dict)
    unsubscribed: list[str] = field(default_factory=list)
    published: list[tuple[str, Any]] = field(default_factory=list)
    _ready_event: asyncio.Event = field(default_factory=asyncio.Event)
    _ids: int = 0

    def __post_init__(self) -> None:
        if self.ready:
            self._ready_event.set()

    def set_ready(self) -> None:
        self.ready = True
        self._ready_event.set()

    def is_ready(self) -> bool:
        return self.ready

    def subscribe(self, destination: str, handler: PushHandler) -> Subscription | None:
        if not self.ready:
            return None
        self._ids += 1
        sub = Subscription(destination, f"sub-{self._ids}", handler)
        self.handlers[destination] = handler
        self.subscriptions[destination] = sub
        return sub

    async def subscribe_when_ready(
        self,
        destination: str,
        handler: PushHandler,
        timeout: float | None = None,
    ) -> Subscription | None:
        await asyncio.wait_for(self._ready_event.wait(), timeout)
        return self.subscribe(destination, handler)

    def unsubscribe(self, destination: str, subscription: Subscription | None = None) -> None:
        current = self.subscriptions.get(destination)
        if current is None or (subscription is not None and subscription != current):
            return
        self.unsubscribed.append(destination)
        del self.subscriptions[destination]
        del self.handlers[destination]

    def publish(self, destination: str, payload: Any) -> bool:
        if not self.ready:
            return False
        self.published.append((destination, payload))
        return True

    def push(self, destination: str, payload: Any) -> None:
        self.handlers[destination](payload)


@dataclass
class FakeChatApi:
    history: ChatHistory = field(default_factory=lambda: ChatHistory(messages=(), meta=None))
    send_result: SendResult = field(default_factory=NoMessage)
    status_response: StatusResponse = field(default_factory=lambda: StatusResponse(state=None))
    error: AppError | None = None
    # When set, send_message and pause/resume block until it is released.
    gate: asyncio.Event | None = None
    sent: list[tuple[str, str]] = field(default_factory=list)
    status_calls: list[tuple[str, str]] = field(default_factory=list)

    async def _maybe_fail(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def start_chat(self, user_id: str) -> dict[str, Any]:
        return {"_id": f"chat-{user_id}"}

    async def list_chats(self) -> list[dict[str, Any]]:
        return []

    async def get_history(self, chat_id: str) -> ChatHistory:
        if self.error is not None:
            raise self.error
        return self.history

    async def send_message(self, chat_id: str, text: str) -> SendResult:
        self.sent.append((chat_id, text))
        await self._maybe_fail()
        return self.send_result

    async def pause(self, chat_id: str) -> StatusResponse:
        self.status_calls.append(("pause", chat_id))
        await self._maybe_fail()
        return self.status_response

    async def resume(self, chat_id: str) -> StatusResponse:
        self.status_calls.append(("resume", chat_id))
        await self._maybe_fail()
        return self.status_response


@dataclass
class FakeGroupChatApi:
    chat: GroupChat = field(
        default_factory=lambda: GroupChat(
            id="g1", name="Dune readers", club_name="Sci-fi club", participants=(), messages=(),
        )
    )
    send_result: SendResult = field(default_factory=NoMessage)
    error: AppError | None = None
    sent: list[tuple[str, str]] = field(default_factory=list)

    async def get_chat(self, chat_id: str) -> GroupChat:
        if self.error is not None:
            raise self.error
        return self.chat

    async def send_message(self, chat_id: str, text: str) -> SendResult:
        self.sent.append((chat_id, text))
        if self.error is not None:
            raise self.error
        return self.send_result


@dataclass
class FakeNotificationApi:
    items: list[Notification] = field(default_factory=list)
    fetch_error: AppError | None = None
    mark_error: AppError | None = None
    marked: list[str] = field(default_factory=list)

    async def fetch(self) -> list[Notification]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.items)

    async def mark_read(self, notification_id: str) -> None:
        self.marked.append(notification_id)
        if self.mark_error is not None:
            raise self.mark_error


def history_with(*messages: Message, meta: ChatMeta | None = None) -> ChatHistory:
    return ChatHistory(messages=tuple(messages), meta=meta)


class FakeSocket:
    """Scripted WebSocket: ``feed`` queues inbound frames, ``sent`` records outbound ones."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._incoming: asyncio.Queue[str | Exception] = asyncio.Queue()

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionError("socket closed")
        self.sent.append(json.loads(message))

    async def recv(self) -> str:
        item = await self._incoming.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(ConnectionError("socket closed"))

    def feed(self, command: str, headers: dict[str, Any] | None = None, body: str | None = None) -> None:
        frame: dict[str, Any] = {"command": command, "headers": headers or {}}
        if body is not None:
            frame["body"] = body
        self._incoming.put_nowait(json.dumps(frame))

    def feed_raw(self, raw: str) -> None:
        self._incoming.put_nowait(raw)

    def drop(self) -> None:
        self._incoming.put_nowait(ConnectionError("connection lost"))

    def commands(self) -> list[str]:
        return [f["command"] for f in self.sent]

    def frames(self, command: str) -> list[dict[str, Any]]:
        return [f for f in self.sent if f["command"] == command]


class FakeSocketFactory:
    """Stands in for ``websockets.connect``. Each successful attempt yields a new FakeSocket."""

    def __init__(self, *, failures: int = 0, auto_connected: bool = True) -> None:
        self.urls: list[str] = []
        self.sockets: list[FakeSocket] = []
        self.failures = failures
        self.auto_connected = auto_connected

    async def __call__(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.failures:
            self.failures -= 1
            raise OSError("connection refused")
        socket = FakeSocket()
        if self.auto_connected:
            socket.feed("CONNECTED", {"version": "1.2"})
        self.sockets.append(socket)
        return socket

    @property
    def last(self) -> FakeSocket:
        return self.sockets[-1]


@pytest.fixture
def socket_factory() -> FakeSocketFactory:
    return FakeSocketFactory()
