from __future__ import annotations

import itertools
import logging
from typing import Literal, Protocol

from litbuddy_chat.application.exceptions import AlreadySubscribedError
from litbuddy_chat.domain.entities.subscription import PushHandler, Subscription
from litbuddy_chat.infrastructure.bus.serializer import deserialize_body
from litbuddy_chat.infrastructure.ws.protocol import (
    StompFrame,
    subscribe_frame,
    unsubscribe_frame,
)

logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    def is_ready(self) -> bool: ...

    def send_nowait(self, frame: StompFrame) -> bool: ...

    async def wait_until_ready(self, timeout: float | None = None) -> None: ...


class SubscriptionRegistry:
    """Destination -> subscription index, one live subscription per destination."""

    def __init__(
        self,
        transport: FrameSink,
        *,
        policy: Literal["replace", "reject"] = "replace",
    ) -> None:
        self._transport = transport
        self._policy = policy
        self._by_destination: dict[str, Subscription] = {}
        self._by_id: dict[str, Subscription] = {}
        self._ids = itertools.count(1)

    @property
    def destinations(self) -> list[str]:
        return list(self._by_destination)

    def __contains__(self, destination: object) -> bool:
        return destination in self._by_destination

    def subscribe(self, destination: str, handler: PushHandler) -> Subscription | None:
        if not self._transport.is_ready():
            logger.warning("STOMP client not connected, cannot subscribe to: %s", destination)
            return None

        if destination in self._by_destination:
            if self._policy == "reject":
                raise AlreadySubscribedError(f"Already subscribed to {destination}")
            logger.debug("[STOMP] Replacing subscription to %s", destination)
            self.unsubscribe(destination)

        sub = Subscription(
            destination=destination,
            subscription_id=f"sub-{next(self._ids)}",
            handler=handler,
        )
        if not self._transport.send_nowait(subscribe_frame(sub.subscription_id, destination)):
            logger.warning("Error subscribing to: %s", destination)
            return None
        self._by_destination[destination] = sub
        self._by_id[sub.subscription_id] = sub
        logger.info("[STOMP] Subscribed to: %s", destination)
        return sub

    async def subscribe_when_ready(
        self,
        destination: str,
        handler: PushHandler,
        timeout: float | None = None,
    ) -> Subscription | None:
        await self._transport.wait_until_ready(timeout)
        return self.subscribe(destination, handler)

    def unsubscribe(self, destination: str, subscription: Subscription | None = None) -> None:
        """Drop the subscription to ``destination``.

        With a ``subscription`` handle, only that subscription is dropped: a
        destination since taken over by another holder is left alone.
        """
        sub = self._by_destination.get(destination)
        if sub is None:
            return
        if subscription is not None and subscription.subscription_id != sub.subscription_id:
            logger.debug(
                "[STOMP] %s is now held by %s, keeping it", destination, sub.subscription_id,
            )
            return
        del self._by_destination[destination]
        self._by_id.pop(sub.subscription_id, None)
        self._transport.send_nowait(unsubscribe_frame(sub.subscription_id, destination))
        logger.info("[STOMP] Unsubscribed from: %s", destination)

    def restore(self) -> None:
        """Re-issue SUBSCRIBE frames after the broker lost them on reconnect."""
        for sub in self._by_destination.values():
            self._transport.send_nowait(subscribe_frame(sub.subscription_id, sub.destination))
        if self._by_destination:
            logger.info("[STOMP] Restored %d subscription(s)", len(self._by_destination))

    def clear(self) -> None:
        self._by_destination.clear()
        self._by_id.clear()

    def dispatch(self, frame: StompFrame) -> None:
        sub = self._by_id.get(frame.subscription or "")
        if sub is None and frame.destination:
            sub = self._by_destination.get(frame.destination)
        if sub is None:
            logger.debug("[STOMP] No subscription for %s", frame.destination)
            return

        try:
            payload = deserialize_body(frame.body)
        except ValueError:
            logger.warning("Error parsing STOMP message on %s, delivering raw body", sub.destination)
            payload = frame.body

        try:
            sub.handler(payload)
        except Exception:
            logger.exception("Push handler failed for %s", sub.destination)
