from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from litbuddy_chat.domain.value_objects.enums import ConversationState


@dataclass(frozen=True, slots=True)
class ConversationStatus:
    state: ConversationState = ConversationState.ACTIVE
    paused_by: str | None = None
    paused_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.state == ConversationState.ACTIVE

    @classmethod
    def active(cls) -> ConversationStatus:
        return cls()

    @classmethod
    def paused(cls, by: str | None, at: datetime | None) -> ConversationStatus:
        return cls(state=ConversationState.PAUSED, paused_by=by, paused_at=at)


@dataclass(frozen=True, slots=True)
class ChatMeta:
    status: ConversationStatus = field(default_factory=ConversationStatus)
    participants: tuple[str, ...] = ()
    name: str = ""

    def with_status(self, status: ConversationStatus) -> ChatMeta:
        return replace(self, status=status)
