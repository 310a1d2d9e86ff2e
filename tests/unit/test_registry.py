from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from litbuddy_chat.application.exceptions import AlreadySubscribedError
from litbuddy_chat.infrastructure.ws.protocol import StompFrame
from litbuddy_chat.infrastructure.ws.registry import SubscriptionRegistry


@dataclass
class FakeFrameSink:
    ready: bool = True
    frames: list[StompFrame] = field(default_factory=list)

    def is_ready(self) -> bool:
        return self.ready

    def send_nowait(self, frame: StompFrame) -> bool:
        if not self.ready:
            return False
        self.frames.append(frame)
        return True

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        self.ready = True

    def commands(self) -> list[tuple[str, str]]:
        return [(f.command, f.headers["id"]) for f in self.frames]


def _message(body: str | None, *, subscription: str | None = None, destination: str | None = None) -> StompFrame:
    headers: dict[str, Any] = {}
    if subscription:
        headers["subscription"] = subscription
    if destination:
        headers["destination"] = destination
    return StompFrame(command="MESSAGE", headers=headers, body=body)


@pytest.fixture
def sink() -> FakeFrameSink:
    return FakeFrameSink()


def test_subscribe_sends_subscribe_frame(sink):
    registry = SubscriptionRegistry(sink)

    sub = registry.subscribe("/topic/chat/c1/messages", lambda p: None)

    assert sub is not None
    assert sub.subscription_id == "sub-1"
    assert sink.frames[0].command == "SUBSCRIBE"
    assert sink.frames[0].destination == "/topic/chat/c1/messages"
    assert "/topic/chat/c1/messages" in registry


def test_subscribe_when_not_connected_is_soft_failure(caplog):
    sink = FakeFrameSink(ready=False)
    registry = SubscriptionRegistry(sink)

    with caplog.at_level(logging.WARNING):
        sub = registry.subscribe("/topic/x", lambda p: None)

    assert sub is None
    assert sink.frames == []
    assert registry.destinations == []
    assert "cannot subscribe to: /topic/x" in caplog.text


def test_resubscribe_replaces_previous_handler(sink):
    registry = SubscriptionRegistry(sink, policy="replace")
    first: list[Any] = []
    second: list[Any] = []

    registry.subscribe("/topic/x", first.append)
    registry.subscribe("/topic/x", second.append)
    registry.dispatch(_message('{"n": 1}', destination="/topic/x"))

    assert sink.commands() == [
        ("SUBSCRIBE", "sub-1"),
        ("UNSUBSCRIBE", "sub-1"),
        ("SUBSCRIBE", "sub-2"),
    ]
    assert first == []
    assert second == [{"n": 1}]


def test_resubscribe_rejected_under_reject_policy(sink):
    registry = SubscriptionRegistry(sink, policy="reject")
    registry.subscribe("/topic/x", lambda p: None)

    with pytest.raises(AlreadySubscribedError):
        registry.subscribe("/topic/x", lambda p: None)
    assert len(sink.frames) == 1


def test_unsubscribe_unknown_destination_does_not_raise(sink):
    registry = SubscriptionRegistry(sink)

    registry.unsubscribe("x")

    assert sink.frames == []


def test_unsubscribe_twice_sends_one_frame(sink):
    registry = SubscriptionRegistry(sink)
    registry.subscribe("/topic/x", lambda p: None)

    registry.unsubscribe("/topic/x")
    registry.unsubscribe("/topic/x")

    assert sink.commands() == [("SUBSCRIBE", "sub-1"), ("UNSUBSCRIBE", "sub-1")]
    assert "/topic/x" not in registry


def test_dispatch_routes_by_subscription_id(sink):
    registry = SubscriptionRegistry(sink)
    got_a: list[Any] = []
    got_b: list[Any] = []
    registry.subscribe("/topic/a", got_a.append)
    registry.subscribe("/topic/b", got_b.append)

    registry.dispatch(_message('{"chatId": "c1"}', subscription="sub-2", destination="/topic/a"))

    assert got_a == []
    assert got_b == [{"chatId": "c1"}]


def test_dispatch_delivers_raw_body_when_not_json(sink):
    registry = SubscriptionRegistry(sink)
    got: list[Any] = []
    registry.subscribe("/topic/a", got.append)

    registry.dispatch(_message("plain text", destination="/topic/a"))

    assert got == ["plain text"]


def test_dispatch_to_unknown_destination_is_ignored(sink):
    registry = SubscriptionRegistry(sink)

    registry.dispatch(_message("{}", destination="/topic/nobody"))


def test_handler_failure_is_contained(sink, caplog):
    registry = SubscriptionRegistry(sink)

    def boom(payload: Any) -> None:
        raise RuntimeError("handler bug")

    registry.subscribe("/topic/a", boom)
    with caplog.at_level(logging.ERROR):
        registry.dispatch(_message("{}", destination="/topic/a"))

    assert "Push handler failed for /topic/a" in caplog.text


def test_restore_reissues_subscriptions_with_same_ids(sink):
    registry = SubscriptionRegistry(sink)
    registry.subscribe("/topic/a", lambda p: None)
    registry.subscribe("/topic/b", lambda p: None)
    sink.frames.clear()

    registry.restore()

    assert sink.commands() == [("SUBSCRIBE", "sub-1"), ("SUBSCRIBE", "sub-2")]


@pytest.mark.asyncio
async def test_subscribe_when_ready_waits_for_connection():
    sink = FakeFrameSink(ready=False)
    registry = SubscriptionRegistry(sink)

    sub = await registry.subscribe_when_ready("/topic/a", lambda p: None)

    assert sub is not None
    assert sink.frames[0].command == "SUBSCRIBE"


def test_unsubscribe_with_stale_handle_keeps_current_holder(sink):
    registry = SubscriptionRegistry(sink, policy="replace")
    got: list[Any] = []
    first = registry.subscribe("/user/u1/queue/messages", lambda p: None)
    registry.subscribe("/user/u1/queue/messages", got.append)

    registry.unsubscribe("/user/u1/queue/messages", first)
    registry.dispatch(_message('{"n": 1}', destination="/user/u1/queue/messages"))

    assert "/user/u1/queue/messages" in registry
    assert got == [{"n": 1}]
    assert sink.commands() == [
        ("SUBSCRIBE", "sub-1"),
        ("UNSUBSCRIBE", "sub-1"),
        ("SUBSCRIBE", "sub-2"),
    ]


def test_unsubscribe_with_own_handle_removes_it(sink):
    registry = SubscriptionRegistry(sink)
    sub = registry.subscribe("/topic/a", lambda p: None)

    registry.unsubscribe("/topic/a", sub)

    assert "/topic/a" not in registry
