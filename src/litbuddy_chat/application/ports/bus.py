from __future__ import annotations

from typing import Any, Protocol

from litbuddy_chat.domain.entities.subscription import PushHandler, Subscription


class PushBus(Protocol):
    """What sessions need from the realtime connection."""

    def is_ready(self) -> bool: ...

    def subscribe(self, destination: str, handler: PushHandler) -> Subscription | None: ...

    async def subscribe_when_ready(
        self,
        destination: str,
        handler: PushHandler,
        timeout: float | None = None,
    ) -> Subscription | None: ...

    def unsubscribe(self, destination: str, subscription: Subscription | None = None) -> None: ...

    def publish(self, destination: str, payload: Any) -> bool: ...
