from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from litbuddy_chat.domain.entities.conversation import ConversationStatus
from litbuddy_chat.domain.value_objects.enums import ConversationState


@dataclass(frozen=True, slots=True)
class StatusChanged:
    chat_id: str
    state: ConversationState
    paused_by: str | None = None
    paused_at: datetime | None = None
    last_active: datetime | None = None

    @property
    def occurred_at(self) -> datetime | None:
        """Server time of the change: pausedAt, else lastActive."""
        return self.paused_at or self.last_active

    def to_status(self) -> ConversationStatus:
        return ConversationStatus(
            state=self.state,
            paused_by=self.paused_by,
            paused_at=self.paused_at,
        )
