from __future__ import annotations

TEMP_ID_PREFIX = "temp-"


def is_temporary(message_id: str | None) -> bool:
    """Optimistic entries carry a client-made id until the server confirms them."""
    return str(message_id).startswith(TEMP_ID_PREFIX)
