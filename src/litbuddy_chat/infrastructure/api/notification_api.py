from __future__ import annotations

from litbuddy_chat.domain.entities.notification import Notification
from litbuddy_chat.infrastructure.api import responses
from litbuddy_chat.infrastructure.api.client import RestClient


class HttpNotificationApi:
    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def fetch(self) -> list[Notification]:
        data = await self._client.request(
            "GET", "/notifications", default_error="Failed to fetch notifications",
        )
        return responses.notification_list(data)

    async def mark_read(self, notification_id: str) -> None:
        await self._client.request(
            "PATCH",
            f"/notifications/{notification_id}/read",
            default_error="Failed to mark read",
        )
