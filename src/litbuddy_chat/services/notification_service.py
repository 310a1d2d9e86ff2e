from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.exceptions import AppError
from litbuddy_chat.application.ports.api import NotificationApi
from litbuddy_chat.application.ports.bus import PushBus
from litbuddy_chat.domain.entities.notification import Notification
from litbuddy_chat.domain.entities.subscription import Subscription
from litbuddy_chat.domain.value_objects import destinations
from litbuddy_chat.infrastructure.mappers.notification import parse_notification

logger = logging.getLogger(__name__)


class NotificationFanIn:
    """History load plus live pushes merged into one most-recent-first list."""

    def __init__(
        self,
        principal: Principal,
        *,
        api: NotificationApi,
        bus: PushBus,
        on_change: Callable[[NotificationFanIn], None] | None = None,
    ) -> None:
        self._principal = principal
        self._api = api
        self._bus = bus
        self._on_change = on_change
        self._notifications: list[Notification] = []
        self._unread = 0
        self._destination = destinations.user_notifications(principal.user_id)
        self._subscribe_task: asyncio.Task[None] | None = None
        self._subscription: Subscription | None = None

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(self._notifications)

    @property
    def unread_count(self) -> int:
        return self._unread

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    async def start(self) -> None:
        if self._bus.is_ready():
            self._subscribe()
        else:
            self._subscribe_task = asyncio.create_task(
                self._subscribe_when_ready(), name="notifications-subscribe",
            )
        await self.refresh()

    async def stop(self) -> None:
        if self._subscribe_task is not None:
            self._subscribe_task.cancel()
            try:
                await self._subscribe_task
            except asyncio.CancelledError:
                pass
            self._subscribe_task = None
        if self._subscription is not None:
            self._bus.unsubscribe(self._destination, self._subscription)
            self._subscription = None
        self._notifications = []
        self._unread = 0
        self._changed()

    async def refresh(self) -> None:
        try:
            items = await self._api.fetch()
        except AppError as exc:
            logger.error("Failed to refresh notifications: %s", exc.detail)
            return
        self._notifications = list(items)
        self._unread = sum(1 for n in items if not n.read)
        self._changed()

    async def mark_read(self, notification_id: str) -> bool:
        index = self._index_of(notification_id)
        previous = self._notifications[index] if index is not None else None
        flipped = previous is not None and not previous.read
        if flipped:
            self._notifications[index] = previous.mark(read=True)
            self._unread = max(0, self._unread - 1)
            self._changed()

        try:
            await self._api.mark_read(notification_id)
        except AppError as exc:
            logger.warning("Failed to mark notification %s read: %s", notification_id, exc.detail)
            if flipped:
                restore_at = self._index_of(notification_id)
                if restore_at is not None:
                    self._notifications[restore_at] = previous
                    self._unread += 1
                self._changed()
            return False
        return True

    async def _subscribe_when_ready(self) -> None:
        self._subscription = await self._bus.subscribe_when_ready(self._destination, self._on_push)

    def _subscribe(self) -> None:
        self._subscription = self._bus.subscribe(self._destination, self._on_push)

    def _on_push(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            logger.warning("Ignoring non-JSON notification push: %.200r", payload)
            return
        self._notifications.insert(0, parse_notification(payload))
        self._unread += 1
        self._changed()

    def _index_of(self, notification_id: str) -> int | None:
        for i, n in enumerate(self._notifications):
            if n.id == notification_id:
                return i
        return None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
