"""One open 1:1 conversation: history, live updates, optimistic send, pause/resume."""
from __future__ import annotations

import logging
from typing import Any, Callable

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.exceptions import AppError, ConversationPausedError
from litbuddy_chat.application.ports.api import ChatApi
from litbuddy_chat.application.ports.bus import PushBus
from litbuddy_chat.application.ports.clock import Clock
from litbuddy_chat.config import Settings
from litbuddy_chat.domain.entities.conversation import ChatMeta, ConversationStatus
from litbuddy_chat.domain.entities.subscription import PushHandler
from litbuddy_chat.domain.value_objects import destinations
from litbuddy_chat.infrastructure.mappers.conversation import parse_status_event
from litbuddy_chat.services.chat_session_base import BaseChatSession
from litbuddy_chat.services.status_sync import StatusSynchronizer

logger = logging.getLogger(__name__)

PAUSED_DETAIL = "Conversation is paused. Resume to send messages."
LOAD_FAILED = "Failed to load messages"
PAUSE_FAILED = "Failed to pause conversation"
RESUME_FAILED = "Failed to resume conversation"


class ConversationSession(BaseChatSession):
    def __init__(
        self,
        chat_id: str,
        principal: Principal,
        *,
        api: ChatApi,
        bus: PushBus,
        clock: Clock | None = None,
        settings: Settings | None = None,
        on_change: Callable[[Any], None] | None = None,
        on_messages_changed: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(
            chat_id,
            principal,
            bus=bus,
            clock=clock,
            settings=settings,
            on_change=on_change,
            on_messages_changed=on_messages_changed,
        )
        self._api = api
        self._meta = ChatMeta()
        self._sync = StatusSynchronizer(principal.user_id, self._clock)

    @property
    def status(self) -> ConversationStatus:
        return self._sync.status

    @property
    def meta(self) -> ChatMeta:
        return self._meta.with_status(self._sync.status)

    @property
    def is_paused(self) -> bool:
        return not self.status.is_active

    @property
    def partner_id(self) -> str | None:
        """The other participant.

        Participant metadata wins when it lists exactly two users; otherwise
        the first sender in the history who is not us.
        """
        me = self.principal.user_id
        participants = self._meta.participants
        if len(participants) == 2:
            other = next((p for p in participants if p != me), None)
            if other:
                return other
        for message in self.messages:
            if message.sender_id and not message.is_from(me):
                return message.sender_id
        return None

    def _destinations(self) -> list[tuple[str, PushHandler]]:
        me = self.principal.user_id
        return [
            (destinations.chat_messages(self.chat_id), self._on_message_push),
            (destinations.chat_status(self.chat_id), self._on_status_push),
            (destinations.user_messages(me), self._on_message_push),
            (destinations.user_conversation_status(me), self._on_status_push),
        ]

    async def _load(self) -> None:
        try:
            history = await self._api.get_history(self.chat_id)
        except AppError as exc:
            logger.warning("Loading chat %s failed: %s", self.chat_id, exc.detail)
            self.status_message = exc.detail or LOAD_FAILED
            return
        if not self._active:
            return
        self._timeline.replace_all(history.messages)
        if history.meta is not None:
            self._meta = history.meta
            self._sync.reset(history.meta.status)

    def _on_status_push(self, payload: Any) -> None:
        event = parse_status_event(payload)
        if event is None or event.chat_id != self.chat_id:
            return
        if self._sync.apply_remote(event):
            self._changed()

    def _ensure_active(self) -> None:
        if not self.status.is_active:
            raise ConversationPausedError(PAUSED_DETAIL)

    async def send(self, text: str) -> bool:
        content = text.strip()
        if not content:
            return False
        try:
            self._ensure_active()
        except ConversationPausedError as exc:
            self.status_message = exc.detail
            self._changed()
            return False
        return await self._send_optimistic(content, self._api.send_message)

    async def set_paused(self, paused: bool) -> bool:
        if paused == self.is_paused:
            return True
        prior = self._sync.begin_local(paused)
        self._changed()
        request = self._api.pause if paused else self._api.resume
        try:
            response = await request(self.chat_id)
        except AppError as exc:
            logger.info("Status change for chat %s failed: %s", self.chat_id, exc.detail)
            self._sync.rollback(prior)
            self.status_message = exc.detail or (PAUSE_FAILED if paused else RESUME_FAILED)
            self._changed()
            return False
        self._sync.confirm_local(paused, response)
        self._changed()
        return True

    async def toggle_pause(self) -> bool:
        return await self.set_paused(not self.is_paused)
