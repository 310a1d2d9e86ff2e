from __future__ import annotations

import logging
from typing import Any, Callable

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.exceptions import AppError
from litbuddy_chat.application.ports.api import GroupChatApi
from litbuddy_chat.application.ports.bus import PushBus
from litbuddy_chat.application.ports.clock import Clock
from litbuddy_chat.config import Settings
from litbuddy_chat.domain.entities.group_chat import GroupChat
from litbuddy_chat.domain.entities.subscription import PushHandler
from litbuddy_chat.domain.value_objects import destinations
from litbuddy_chat.services.chat_session_base import BaseChatSession

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load chat"


class GroupChatSession(BaseChatSession):
    """A book-club group chat. Same delivery model as 1:1 chats, no pausing."""

    def __init__(
        self,
        chat_id: str,
        principal: Principal,
        *,
        api: GroupChatApi,
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
        self.chat: GroupChat | None = None

    def _destinations(self) -> list[tuple[str, PushHandler]]:
        return [
            (destinations.group_chat_messages(self.chat_id), self._on_message_push),
            (destinations.user_group_messages(self.principal.user_id), self._on_message_push),
        ]

    async def _load(self) -> None:
        try:
            chat = await self._api.get_chat(self.chat_id)
        except AppError as exc:
            logger.warning("Loading group chat %s failed: %s", self.chat_id, exc.detail)
            self.status_message = exc.detail or LOAD_FAILED
            return
        if not self._active:
            return
        self.chat = chat
        self._timeline.replace_all(chat.messages)

    async def send(self, text: str) -> bool:
        content = text.strip()
        if not content:
            return False
        return await self._send_optimistic(content, self._api.send_message)
