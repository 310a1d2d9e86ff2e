"""Realtime connection manager: one transport, one subscription registry."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from litbuddy_chat.application.ports.clock import Clock
from litbuddy_chat.config import Settings, settings as default_settings
from litbuddy_chat.domain.entities.subscription import PushHandler, Subscription
from litbuddy_chat.domain.value_objects.enums import ConnectionState
from litbuddy_chat.infrastructure.ws.protocol import StompFrame
from litbuddy_chat.infrastructure.ws.registry import SubscriptionRegistry
from litbuddy_chat.infrastructure.ws.transport import SocketFactory, StompTransport

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Multiplexes conversation and notification subscriptions over one socket."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        socket_factory: SocketFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        cfg = settings or default_settings
        self._transport = StompTransport(
            settings=cfg,
            socket_factory=socket_factory,
            clock=clock,
            on_message=self._on_message,
            on_connected=self._on_connected,
        )
        self._registry = SubscriptionRegistry(self._transport, policy=cfg.RESUBSCRIBE_POLICY)

    @property
    def state(self) -> ConnectionState:
        return self._transport.state

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    def open(self, token: str) -> asyncio.Task[None]:
        return self._transport.connect(token)

    async def close(self) -> None:
        self._registry.clear()
        await self._transport.close()

    def is_ready(self) -> bool:
        return self._transport.is_ready()

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        await self._transport.wait_until_ready(timeout)

    def subscribe(self, destination: str, handler: PushHandler) -> Subscription | None:
        return self._registry.subscribe(destination, handler)

    async def subscribe_when_ready(
        self,
        destination: str,
        handler: PushHandler,
        timeout: float | None = None,
    ) -> Subscription | None:
        return await self._registry.subscribe_when_ready(destination, handler, timeout)

    def unsubscribe(self, destination: str, subscription: Subscription | None = None) -> None:
        self._registry.unsubscribe(destination, subscription)

    def publish(self, destination: str, payload: Any) -> bool:
        return self._transport.publish(destination, payload)

    def _on_message(self, frame: StompFrame) -> None:
        self._registry.dispatch(frame)

    def _on_connected(self) -> None:
        self._registry.restore()
