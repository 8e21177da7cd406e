"""
Data models for the voice bridge: per-call state, static session
configuration and the inbound events produced by each adapter.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import config


@dataclass
class CallState:
    """
    Mutable per-call state shared between the Twilio receiver and the
    OpenAI sender tasks. Owned by exactly one SessionBridge.
    """
    stream_sid: Optional[str] = None
    latest_media_timestamp: int = 0  # ms (from Twilio media events)
    last_assistant_item: Optional[str] = None
    mark_queue: List[str] = field(default_factory=list)
    response_start_timestamp_twilio: Optional[int] = None  # ms

    def reset_for_stream(self, stream_sid: str) -> None:
        """Start a fresh stream, dropping everything tracked for the previous one."""
        self.stream_sid = stream_sid
        self.latest_media_timestamp = 0
        self.last_assistant_item = None
        self.mark_queue = []
        self.response_start_timestamp_twilio = None

    def clear_response(self) -> None:
        self.mark_queue = []
        self.last_assistant_item = None
        self.response_start_timestamp_twilio = None

    @property
    def is_responding(self) -> bool:
        """True while assistant audio is in flight toward the caller."""
        return bool(self.mark_queue) and self.response_start_timestamp_twilio is not None


@dataclass(frozen=True)
class SessionConfig:
    """Static speech-session parameters pushed once per call."""
    voice: str
    instructions: str
    input_audio_format: str = "g711_ulaw"
    output_audio_format: str = "g711_ulaw"
    turn_detection_mode: str = "server_vad"
    modalities: List[str] = field(default_factory=lambda: ["text", "audio"])
    temperature: float = 0.8
    initial_greeting: str = "Hello! How can I assist you today?"

    @classmethod
    def from_env(cls) -> "SessionConfig":
        return cls(
            voice=config.VOICE,
            instructions=config.SYSTEM_MESSAGE,
            input_audio_format=config.INPUT_AUDIO_FORMAT,
            output_audio_format=config.OUTPUT_AUDIO_FORMAT,
            turn_detection_mode=config.TURN_DETECTION_MODE,
            modalities=list(config.MODALITIES),
            temperature=config.TEMPERATURE,
            initial_greeting=config.INITIAL_GREETING,
        )


# =============================
# Telephony (Twilio) inbound events
# =============================
@dataclass(frozen=True)
class StartEvent:
    stream_sid: str


@dataclass(frozen=True)
class MediaEvent:
    timestamp: int
    payload: str


@dataclass(frozen=True)
class MarkEvent:
    name: Optional[str] = None


@dataclass(frozen=True)
class StopEvent:
    pass


@dataclass(frozen=True)
class UnknownEvent:
    name: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)


# =============================
# Speech model (OpenAI Realtime) inbound events
# =============================
@dataclass(frozen=True)
class SessionCreated:
    session_id: Optional[str] = None


@dataclass(frozen=True)
class AudioDelta:
    item_id: Optional[str]
    payload: str


@dataclass(frozen=True)
class SpeechStarted:
    pass


@dataclass(frozen=True)
class SpeechError:
    code: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class OtherSpeechEvent:
    type: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)
