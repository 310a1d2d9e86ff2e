from __future__ import annotations

from typing import Any, Protocol

from litbuddy_chat.application.dto.results import ChatHistory, SendResult, StatusResponse
from litbuddy_chat.domain.entities.group_chat import GroupChat
from litbuddy_chat.domain.entities.notification import Notification


class ChatApi(Protocol):
    async def start_chat(self, user_id: str) -> dict[str, Any]: ...

    async def list_chats(self) -> list[dict[str, Any]]: ...

    async def get_history(self, chat_id: str) -> ChatHistory: ...

    async def send_message(self, chat_id: str, text: str) -> SendResult: ...

    async def pause(self, chat_id: str) -> StatusResponse: ...

    async def resume(self, chat_id: str) -> StatusResponse: ...


class GroupChatApi(Protocol):
    async def get_chat(self, chat_id: str) -> GroupChat: ...

    async def send_message(self, chat_id: str, text: str) -> SendResult: ...


class NotificationApi(Protocol):
    async def fetch(self) -> list[Notification]: ...

    async def mark_read(self, notification_id: str) -> None: ...
