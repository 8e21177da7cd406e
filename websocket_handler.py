"""
WebSocket handler wiring a Twilio media stream to an OpenAI realtime session.
"""
from typing import Callable, Optional

from fastapi import WebSocket

from logging_config import get_logger
from models import CallState, SessionConfig
from openai_client import RealtimeSession
from session_bridge import SessionBridge
from twilio_stream import TwilioConnection

logger = get_logger(__name__)


class WebSocketHandler:
    """Handles WebSocket connections for realtime voice communication."""

    def __init__(
        self,
        session_config: Optional[SessionConfig] = None,
        speech_factory: Optional[Callable[[SessionConfig], RealtimeSession]] = None,
    ):
        self.session_config = session_config or SessionConfig.from_env()
        self.speech_factory = speech_factory or RealtimeSession

    async def handle_media_stream(self, websocket: WebSocket):
        """Main WebSocket handler for the media stream from Twilio; one bridge per call."""
        await websocket.accept()
        logger.info("Client connected")

        bridge = SessionBridge(
            telephony=TwilioConnection(websocket),
            speech=self.speech_factory(self.session_config),
            state=CallState(),
        )
        await bridge.run()
        logger.info("Client disconnected", stream_sid=bridge.state.stream_sid)
