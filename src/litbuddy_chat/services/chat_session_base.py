"""Lifecycle shared by 1:1 and group chat sessions."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.dto.results import SendResult
from litbuddy_chat.application.exceptions import AlreadySubscribedError, AppError
from litbuddy_chat.application.ports.bus import PushBus
from litbuddy_chat.application.ports.clock import Clock, SystemClock
from litbuddy_chat.config import Settings, settings as default_settings
from litbuddy_chat.domain.entities.message import Message
from litbuddy_chat.domain.entities.subscription import PushHandler, Subscription
from litbuddy_chat.domain.value_objects.enums import SessionPhase
from litbuddy_chat.infrastructure.mappers.conversation import parse_message_event
from litbuddy_chat.services.debounce import Debouncer
from litbuddy_chat.services.message_timeline import MessageTimeline

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"


class BaseChatSession:
    def __init__(
        self,
        chat_id: str,
        principal: Principal,
        *,
        bus: PushBus,
        clock: Clock | None = None,
        settings: Settings | None = None,
        on_change: Callable[[Any], None] | None = None,
        on_messages_changed: Callable[[], None] | None = None,
    ) -> None:
        cfg = settings or default_settings
        self.chat_id = chat_id
        self.principal = principal
        self.status_message = ""
        self._bus = bus
        self._clock = clock or SystemClock()
        self._on_change = on_change
        self._on_messages_changed = on_messages_changed
        self._phase = SessionPhase.LOADING
        self._timeline = MessageTimeline()
        self._active = False
        self._subscriptions: list[Subscription] = []
        self._subscribe_task: asyncio.Task[None] | None = None
        self._scroll = Debouncer(cfg.SCROLL_DEBOUNCE_SECONDS, self._fire_messages_changed)

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._timeline.messages

    @property
    def subscribed_destinations(self) -> list[str]:
        return [sub.destination for sub in self._subscriptions]

    async def __aenter__(self) -> BaseChatSession:
        await self.activate()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.deactivate()

    async def activate(self) -> None:
        self._active = True
        self._phase = SessionPhase.LOADING
        self._start_subscriptions()
        await self._load()
        if self._active:
            self._phase = SessionPhase.READY
            self._changed(messages=True)

    async def deactivate(self) -> None:
        self._active = False
        if self._subscribe_task is not None:
            self._subscribe_task.cancel()
            try:
                await self._subscribe_task
            except asyncio.CancelledError:
                pass
            self._subscribe_task = None
        for sub in self._subscriptions:
            self._bus.unsubscribe(sub.destination, sub)
        self._subscriptions.clear()
        self._scroll.cancel()

    async def _load(self) -> None:
        raise NotImplementedError

    def _destinations(self) -> list[tuple[str, PushHandler]]:
        raise NotImplementedError

    def _start_subscriptions(self) -> None:
        if self._bus.is_ready():
            self._subscribe_all()
        else:
            self._subscribe_task = asyncio.create_task(
                self._subscribe_when_ready(), name=f"subscribe-{self.chat_id}",
            )

    async def _subscribe_when_ready(self) -> None:
        for destination, handler in self._destinations():
            try:
                sub = await self._bus.subscribe_when_ready(destination, handler)
            except AlreadySubscribedError:
                logger.warning("Destination %s is held by another session", destination)
                continue
            if sub is not None:
                self._subscriptions.append(sub)

    def _subscribe_all(self) -> None:
        for destination, handler in self._destinations():
            try:
                sub = self._bus.subscribe(destination, handler)
            except AlreadySubscribedError:
                logger.warning("Destination %s is held by another session", destination)
                continue
            if sub is not None:
                self._subscriptions.append(sub)

    def _on_message_push(self, payload: Any) -> None:
        event = parse_message_event(payload)
        if event is None or event.chat_id != self.chat_id:
            return
        if self._timeline.append(event.message):
            self._changed(messages=True)

    async def _send_optimistic(
        self,
        text: str,
        send: Callable[[str, str], Awaitable[SendResult]],
    ) -> bool:
        self._timeline.add_optimistic(text, self.principal.as_sender(), self._clock.now())
        self._changed(messages=True)
        try:
            result = await send(self.chat_id, text)
        except AppError as exc:
            logger.info("Send to chat %s failed: %s", self.chat_id, exc.detail)
            self._timeline.rollback_optimistic()
            self.status_message = exc.detail or SEND_FAILED
            self._changed(messages=True)
            return False
        self._timeline.reconcile(result)
        self.status_message = ""
        self._changed(messages=True)
        return True

    def _changed(self, messages: bool = False) -> None:
        if messages and self._active:
            self._scroll.trigger()
        if self._on_change is not None:
            self._on_change(self)

    def _fire_messages_changed(self) -> None:
        if self._on_messages_changed is not None:
            self._on_messages_changed()
