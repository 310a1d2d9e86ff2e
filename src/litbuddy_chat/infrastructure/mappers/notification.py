from __future__ import annotations

from typing import Any

from litbuddy_chat.domain.entities.notification import Notification
from litbuddy_chat.domain.value_objects.enums import NotificationType
from litbuddy_chat.infrastructure.mappers.message import parse_datetime


def parse_notification(raw: dict[str, Any]) -> Notification:
    data = raw.get("data")
    return Notification(
        id=str(raw.get("_id") or raw.get("id") or ""),
        type=str(raw.get("type") or NotificationType.SYSTEM),
        title=str(raw.get("title") or ""),
        body=str(raw.get("body") or ""),
        created_at=parse_datetime(raw.get("createdAt")),
        read=bool(raw.get("read", False)),
        data=data if isinstance(data, dict) else {},
    )
