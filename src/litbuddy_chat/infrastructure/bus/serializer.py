from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_body(payload: Any) -> str:
    return json.dumps(payload, cls=_Encoder)


def deserialize_body(raw: str | bytes | None) -> Any:
    """Parse a JSON frame body. Raises ValueError on malformed input."""
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return json.loads(raw)
