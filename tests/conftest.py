"""Shared test fixtures and configuration."""

import pytest

from models import CallState, SessionConfig
from session_bridge import SessionBridge
from tests.fakes import FakeSpeech, FakeTwilio


@pytest.fixture
def session_config() -> SessionConfig:
    """Static session configuration for tests."""
    return SessionConfig(
        voice="alloy",
        instructions="You are a helpful support agent.",
        temperature=0.8,
        initial_greeting="Hello! How can I assist you today?",
    )


@pytest.fixture
def twilio() -> FakeTwilio:
    return FakeTwilio()


@pytest.fixture
def speech(session_config: SessionConfig) -> FakeSpeech:
    return FakeSpeech(session_config)


@pytest.fixture
def bridge(twilio: FakeTwilio, speech: FakeSpeech) -> SessionBridge:
    """Bridge wired to fake adapters with a fresh CallState."""
    return SessionBridge(telephony=twilio, speech=speech, state=CallState(), init_delay_ms=0)
