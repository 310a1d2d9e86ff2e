from __future__ import annotations

from dataclasses import dataclass

from litbuddy_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class GroupChat:
    id: str
    name: str
    club_name: str | None
    participants: tuple[str, ...]
    messages: tuple[Message, ...]
