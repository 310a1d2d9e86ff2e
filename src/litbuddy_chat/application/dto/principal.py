from __future__ import annotations

from dataclasses import dataclass

from litbuddy_chat.domain.entities.message import Sender


@dataclass(frozen=True, slots=True)
class Principal:
    """The logged-in user on whose behalf the client runs."""

    user_id: str
    display_name: str | None = None

    def as_sender(self) -> Sender:
        return Sender(id=self.user_id, name=self.display_name or "You")
