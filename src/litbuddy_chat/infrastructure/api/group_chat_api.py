from __future__ import annotations

from typing import Any

from litbuddy_chat.application.dto.results import SendResult
from litbuddy_chat.domain.entities.group_chat import GroupChat
from litbuddy_chat.infrastructure.api import responses
from litbuddy_chat.infrastructure.api.client import RestClient
from litbuddy_chat.infrastructure.mappers.group_chat import parse_group_chat


class HttpGroupChatApi:
    """Book-club group chat routes under ``/group-chats`` (bearer auth)."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def _call(self, method: str, path: str, default_error: str, **kwargs: Any) -> Any:
        return await self._client.request(
            method, path, default_error=default_error, bearer=True, **kwargs,
        )

    async def list_for_club(self, club_id: str) -> list[GroupChat]:
        data = await self._call("GET", f"/group-chats/{club_id}", "Failed to fetch group chats")
        return [parse_group_chat(c) for c in data if isinstance(c, dict)] if isinstance(data, list) else []

    async def get_chat(self, chat_id: str) -> GroupChat:
        data = await self._call("GET", f"/group-chats/chat/{chat_id}", "Failed to load chat")
        return parse_group_chat(data)

    async def create(self, club_id: str, fields: dict[str, Any]) -> GroupChat:
        data = await self._call(
            "POST", f"/group-chats/{club_id}", "Failed to create group chat", json=fields,
        )
        return parse_group_chat(data)

    async def update(self, chat_id: str, fields: dict[str, Any]) -> GroupChat:
        data = await self._call(
            "PUT", f"/group-chats/chat/{chat_id}", "Failed to update group chat", json=fields,
        )
        return parse_group_chat(data)

    async def delete(self, chat_id: str) -> None:
        await self._call("DELETE", f"/group-chats/chat/{chat_id}", "Failed to delete group chat")

    async def send_message(self, chat_id: str, text: str) -> SendResult:
        # The route only parses multipart bodies.
        data = await self._call(
            "POST",
            f"/group-chats/message/{chat_id}",
            "Failed to send message",
            files={"text": (None, text)},
        )
        return responses.send_result(data)

    async def add_participant(self, chat_id: str, user_id: str) -> GroupChat:
        data = await self._call(
            "POST",
            f"/group-chats/chat/{chat_id}/participants",
            "Failed to add participant",
            json={"userId": user_id},
        )
        return parse_group_chat(data)

    async def remove_participant(self, chat_id: str, user_id: str) -> None:
        await self._call(
            "DELETE",
            f"/group-chats/chat/{chat_id}/participants/{user_id}",
            "Failed to remove participant",
        )
