from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from litbuddy_chat.infrastructure.bus.serializer import deserialize_body, serialize_body
from litbuddy_chat.infrastructure.ws.protocol import send_frame


@pytest.mark.parametrize("payload", ["123", "true", "hello", ""])
def test_string_payloads_survive_the_wire(payload):
    frame = send_frame("/app/x", payload)

    assert deserialize_body(frame.body) == payload


def test_uuid_and_datetime_are_encoded():
    key = uuid.UUID("12345678-1234-5678-1234-567812345678")
    at = datetime(2024, 1, 1, tzinfo=timezone.utc)

    body = serialize_body({"id": key, "at": at})

    assert deserialize_body(body) == {"id": str(key), "at": "2024-01-01T00:00:00+00:00"}


def test_malformed_body_raises_value_error():
    with pytest.raises(ValueError):
        deserialize_body(b"{not json")
