from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

import httpx

from litbuddy_chat.application.dto.principal import Principal
from litbuddy_chat.application.ports.clock import Clock
from litbuddy_chat.config import Settings, settings as default_settings
from litbuddy_chat.domain.value_objects.enums import ConnectionState
from litbuddy_chat.infrastructure.api.chat_api import HttpChatApi
from litbuddy_chat.infrastructure.api.client import RestClient
from litbuddy_chat.infrastructure.api.group_chat_api import HttpGroupChatApi
from litbuddy_chat.infrastructure.api.notification_api import HttpNotificationApi
from litbuddy_chat.infrastructure.auth.token_claims import principal_from_token
from litbuddy_chat.infrastructure.ws.manager import ConnectionManager
from litbuddy_chat.infrastructure.ws.transport import SocketFactory
from litbuddy_chat.services.chat_session_base import BaseChatSession
from litbuddy_chat.services.conversation_session import ConversationSession
from litbuddy_chat.services.group_chat_session import GroupChatSession
from litbuddy_chat.services.notification_service import NotificationFanIn

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or default_settings.LOG_LEVEL, format=LOG_FORMAT)


class RealtimeSession:
    """Everything one logged-in user needs for live chat and notifications.

    Created on login, stopped on logout. All open chats and the notification
    fan-in share the single connection owned by ``connection``.
    """

    def __init__(
        self,
        principal: Principal,
        token: str,
        *,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
        cookies: dict[str, str] | None = None,
        socket_factory: SocketFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.principal = principal
        self._token = token
        self._settings = settings or default_settings
        self._clock = clock

        self.connection = ConnectionManager(
            settings=self._settings, socket_factory=socket_factory, clock=clock,
        )
        self._rest = RestClient(settings=self._settings, http=http, token=token, cookies=cookies)
        self.chat_api = HttpChatApi(self._rest)
        self.group_chat_api = HttpGroupChatApi(self._rest)
        self.notifications = NotificationFanIn(
            principal, api=HttpNotificationApi(self._rest), bus=self.connection,
        )
        self._sessions: dict[tuple[str, str], BaseChatSession] = {}
        self._opening: dict[tuple[str, str], asyncio.Task[BaseChatSession]] = {}

    @classmethod
    def from_token(cls, token: str, display_name: str | None = None, **kwargs: Any) -> RealtimeSession:
        return cls(principal_from_token(token, display_name), token, **kwargs)

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    async def start(self) -> None:
        self.connection.open(self._token)
        await self.notifications.start()
        logger.info("Realtime session started for user %s", self.principal.user_id)

    async def stop(self) -> None:
        if self._opening:
            await asyncio.gather(*self._opening.values(), return_exceptions=True)
        for session in list(self._sessions.values()):
            await session.deactivate()
        self._sessions.clear()
        await self.notifications.stop()
        await self.connection.close()
        await self._rest.aclose()
        logger.info("Realtime session stopped for user %s", self.principal.user_id)

    async def open_conversation(self, chat_id: str, **callbacks: Any) -> ConversationSession:
        return await self._open(("chat", chat_id), lambda: ConversationSession(
            chat_id,
            self.principal,
            api=self.chat_api,
            bus=self.connection,
            clock=self._clock,
            settings=self._settings,
            **callbacks,
        ))

    async def open_group_chat(self, chat_id: str, **callbacks: Any) -> GroupChatSession:
        return await self._open(("group", chat_id), lambda: GroupChatSession(
            chat_id,
            self.principal,
            api=self.group_chat_api,
            bus=self.connection,
            clock=self._clock,
            settings=self._settings,
            **callbacks,
        ))

    async def _open(self, key: tuple[str, str], build: Callable[[], Any]) -> Any:
        existing = self._sessions.get(key)
        if existing is not None:
            return existing
        # Concurrent opens of one chat share a single activation.
        task = self._opening.get(key)
        if task is None:
            task = asyncio.create_task(self._activate(key, build()), name=f"open-{key[0]}-{key[1]}")
            self._opening[key] = task
        return await task

    async def _activate(self, key: tuple[str, str], session: BaseChatSession) -> BaseChatSession:
        try:
            await session.activate()
            self._sessions[key] = session
            return session
        finally:
            self._opening.pop(key, None)

    async def close_conversation(self, chat_id: str) -> None:
        session = self._sessions.pop(("chat", chat_id), None)
        if session is not None:
            await session.deactivate()

    async def close_group_chat(self, chat_id: str) -> None:
        session = self._sessions.pop(("group", chat_id), None)
        if session is not None:
            await session.deactivate()


@asynccontextmanager
async def realtime_session(
    principal: Principal,
    token: str,
    **kwargs: Any,
) -> AsyncIterator[RealtimeSession]:
    """Login / logout lifecycle."""
    session = RealtimeSession(principal, token, **kwargs)
    await session.start()
    try:
        yield session
    finally:
        await session.stop()
