from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    type: str
    title: str
    body: str
    created_at: datetime | None
    read: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    def mark(self, read: bool) -> Notification:
        return replace(self, read=read)
