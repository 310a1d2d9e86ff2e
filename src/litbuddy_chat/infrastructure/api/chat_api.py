from __future__ import annotations

from typing import Any

from litbuddy_chat.application.dto.results import ChatHistory, SendResult, StatusResponse
from litbuddy_chat.infrastructure.api import responses
from litbuddy_chat.infrastructure.api.client import RestClient
from litbuddy_chat.infrastructure.mappers.conversation import parse_status_response


class HttpChatApi:
    """1:1 chat routes under ``/chat``."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def start_chat(self, user_id: str) -> dict[str, Any]:
        """Start, or fetch the existing, chat with a matched user."""
        data = await self._client.request(
            "POST", f"/chat/{user_id}", default_error="Failed to start chat",
        )
        return data if isinstance(data, dict) else {}

    async def list_chats(self) -> list[dict[str, Any]]:
        data = await self._client.request(
            "GET",
            "/chat",
            default_error="Failed to fetch chats",
            timeout=self._client.settings.HISTORY_TIMEOUT_SECONDS,
        )
        return responses.chat_list(data)

    async def get_history(self, chat_id: str) -> ChatHistory:
        data = await self._client.request(
            "GET",
            f"/chat/{chat_id}",
            default_error="Failed to fetch chat messages",
            timeout=self._client.settings.HISTORY_TIMEOUT_SECONDS,
        )
        return responses.chat_history(data)

    async def send_message(self, chat_id: str, text: str) -> SendResult:
        data = await self._client.request(
            "POST",
            f"/chat/message/{chat_id}",
            default_error="Failed to send message",
            json={"text": text},
        )
        return responses.send_result(data)

    async def pause(self, chat_id: str) -> StatusResponse:
        data = await self._client.request(
            "PATCH", f"/chat/{chat_id}/pause", default_error="Failed to pause chat",
        )
        return parse_status_response(data)

    async def resume(self, chat_id: str) -> StatusResponse:
        data = await self._client.request(
            "PATCH", f"/chat/{chat_id}/resume", default_error="Failed to resume chat",
        )
        return parse_status_response(data)
