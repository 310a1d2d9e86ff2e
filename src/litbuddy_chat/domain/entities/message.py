from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Sender:
    id: str | None
    name: str


SYSTEM_SENDER = Sender(id=None, name="System")


@dataclass(frozen=True, slots=True)
class Attachment:
    filename: str
    original_name: str
    mimetype: str
    size: int
    url: str


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    text: str
    sender: Sender
    timestamp: datetime | None
    optimistic: bool = False
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

    @property
    def sender_id(self) -> str | None:
        return self.sender.id

    def is_from(self, user_id: str | None) -> bool:
        return self.sender.id is not None and str(self.sender.id) == str(user_id)
