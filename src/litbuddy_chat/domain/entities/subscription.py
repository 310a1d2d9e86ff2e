from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

PushHandler = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class Subscription:
    destination: str
    subscription_id: str
    handler: PushHandler
