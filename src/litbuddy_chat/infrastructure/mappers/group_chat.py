from __future__ import annotations

from typing import Any

from litbuddy_chat.domain.entities.group_chat import GroupChat
from litbuddy_chat.infrastructure.mappers.conversation import participant_ids
from litbuddy_chat.infrastructure.mappers.message import entity_id, parse_messages


def parse_group_chat(raw: dict[str, Any]) -> GroupChat:
    club = raw.get("club")
    return GroupChat(
        id=entity_id(raw) or "",
        name=str(raw.get("name") or ""),
        club_name=str(club["name"]) if isinstance(club, dict) and club.get("name") else None,
        participants=participant_ids(raw.get("participants")),
        messages=parse_messages(raw.get("messages") or []),
    )
