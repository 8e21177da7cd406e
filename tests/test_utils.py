"""Tests for event normalization, the task guard and log redaction."""

import pytest

from exceptions import ConnectionClosed
from logging_config import sanitize_secrets
from utils import normalize_event_to_dict, parse_json_frame, safe_task


class SdkEvent:
    """Looks like a pydantic model from the OpenAI SDK."""

    def model_dump(self):
        return {"type": "session.created", "session": {"id": "sess_1"}}


def test_normalize_event_variants() -> None:
    assert normalize_event_to_dict({"type": "x"}) == {"type": "x"}
    assert normalize_event_to_dict('{"type": "y"}') == {"type": "y"}
    assert normalize_event_to_dict(b'{"type": "z"}') == {"type": "z"}
    assert normalize_event_to_dict(SdkEvent())["type"] == "session.created"
    assert normalize_event_to_dict("garbage")["type"] == "unknown"
    assert normalize_event_to_dict(object())["type"] == "unknown"


def test_parse_json_frame_rejects_non_objects() -> None:
    assert parse_json_frame('{"event": "mark"}') == {"event": "mark"}
    assert parse_json_frame("[1, 2]") is None
    assert parse_json_frame("{") is None


@pytest.mark.asyncio
async def test_safe_task_returns_failure() -> None:
    async def clean():
        return None

    async def closed():
        raise ConnectionClosed("gone")

    async def broken():
        raise ValueError("boom")

    assert await safe_task(clean(), "clean") is None
    assert isinstance(await safe_task(closed(), "closed"), ConnectionClosed)
    assert isinstance(await safe_task(broken(), "broken"), ValueError)


def test_sanitize_secrets_redacts_keys() -> None:
    event = sanitize_secrets(None, "info", {"event": "hi", "api_key": "sk-abcdef", "stream_sid": "MZ1"})
    assert event["api_key"] == "sk***REDACTED***"
    assert event["stream_sid"] == "MZ1"
