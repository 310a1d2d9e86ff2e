from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from litbuddy_chat.domain.entities.message import SYSTEM_SENDER, Attachment, Message, Sender


def parse_datetime(value: Any) -> datetime | None:
    """ISO-8601 string (``Z`` suffix allowed), epoch milliseconds or datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def entity_id(raw: Any) -> str | None:
    """Id of a populated document, a bare id string, or None."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        value = raw.get("_id") or raw.get("id")
        return str(value) if value else None
    return str(raw)


def parse_sender(raw: Any) -> Sender:
    if not raw:
        return SYSTEM_SENDER
    if isinstance(raw, str):
        return Sender(id=raw, name=raw)
    if isinstance(raw, dict):
        name = raw.get("displayName") or raw.get("name") or raw.get("email") or "User"
        return Sender(id=entity_id(raw), name=str(name))
    return Sender(id=str(raw), name=str(raw))


def parse_attachment(raw: dict[str, Any]) -> Attachment:
    return Attachment(
        filename=str(raw.get("filename", "")),
        original_name=str(raw.get("originalname") or raw.get("filename", "")),
        mimetype=str(raw.get("mimetype", "")),
        size=int(raw.get("size") or 0),
        url=str(raw.get("url", "")),
    )


def parse_message(raw: dict[str, Any]) -> Message:
    return Message(
        id=str(raw.get("_id") or raw.get("id") or ""),
        text=str(raw.get("text") or ""),
        sender=parse_sender(raw.get("sender")),
        timestamp=parse_datetime(raw.get("timestamp") or raw.get("createdAt")),
        optimistic=bool(raw.get("_optimistic", False)),
        attachments=tuple(
            parse_attachment(a) for a in raw.get("attachments") or [] if isinstance(a, dict)
        ),
    )


def parse_messages(items: list[Any]) -> tuple[Message, ...]:
    return tuple(parse_message(m) for m in items if isinstance(m, dict))
