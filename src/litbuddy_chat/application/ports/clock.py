"""Time source for optimistic message ids and stale-echo arbitration."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def epoch_ms(moment: datetime) -> int:
    """Milliseconds since the epoch, the resolution the backend stamps with."""
    return int(moment.timestamp() * 1000)
