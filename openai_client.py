"""
OpenAI Realtime side of the bridge.
"""
import asyncio
from typing import Any, AsyncIterator, Dict, Optional, Union

from openai import AsyncOpenAI, OpenAIError
from websockets.exceptions import ConnectionClosed as WebSocketConnectionClosed
from websockets.exceptions import WebSocketException

from config import (
    LOG_EVENT_TYPES,
    OPENAI_API_KEY,
    OPENAI_REALTIME_MODEL,
    SPEECH_CONNECT_TIMEOUT_S,
)
from exceptions import ConnectionClosed, SpeechSessionError
from logging_config import get_logger
from models import (
    AudioDelta,
    OtherSpeechEvent,
    SessionConfig,
    SessionCreated,
    SpeechError,
    SpeechStarted,
)
from openai_service import OpenAIService
from utils import normalize_event_to_dict

logger = get_logger(__name__)

SpeechEvent = Union[SessionCreated, AudioDelta, SpeechStarted, SpeechError, OtherSpeechEvent]

# Beta and GA names for the same server event
AUDIO_DELTA_TYPES = ("response.audio.delta", "response.output_audio.delta")


class RealtimeSession:
    """
    One duplex session with the OpenAI Realtime API.

    `connection` may be an already-open realtime connection (anything with
    async `send`, `close` and async iteration); otherwise `connect()` opens one
    through the OpenAI SDK.
    """

    def __init__(
        self,
        session_config: SessionConfig,
        api_key: Optional[str] = None,
        model: str = OPENAI_REALTIME_MODEL,
        connect_timeout: float = SPEECH_CONNECT_TIMEOUT_S,
        connection: Any = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.session_config = session_config
        self.api_key = api_key if api_key is not None else OPENAI_API_KEY
        self.model = model
        self.connect_timeout = connect_timeout
        self._connection = connection
        self._client = client
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._connection is not None and not self._closed

    async def connect(self) -> None:
        """Open the realtime session; failures surface as SpeechSessionError."""
        if self._connection is not None:
            return
        if self._client is None:
            if not self.api_key:
                raise SpeechSessionError("Missing the OpenAI API key. Please set it in the .env file.")
            self._client = AsyncOpenAI(api_key=self.api_key)
        manager = self._client.beta.realtime.connect(model=self.model)
        try:
            self._connection = await asyncio.wait_for(manager.enter(), timeout=self.connect_timeout)
        except asyncio.TimeoutError as e:
            raise SpeechSessionError(f"Timed out after {self.connect_timeout}s connecting to OpenAI Realtime") from e
        except (OpenAIError, WebSocketException, OSError) as e:
            raise SpeechSessionError(f"OpenAI Realtime handshake failed: {e}") from e
        logger.info("Connected to OpenAI Realtime API", model=self.model)

    async def events(self) -> AsyncIterator[SpeechEvent]:
        """
        Yield server events until the session closes. A clean close ends the
        sequence; an abrupt one raises SpeechSessionError.
        """
        if self._connection is None:
            raise SpeechSessionError("OpenAI Realtime session is not connected")
        try:
            async for raw in self._connection:
                yield self.parse_event(normalize_event_to_dict(raw))
        except WebSocketConnectionClosed as e:
            if not self._closed:
                self._closed = True
                raise SpeechSessionError(f"OpenAI Realtime connection closed abruptly: {e}") from e
        except OpenAIError as e:
            self._closed = True
            raise SpeechSessionError(f"OpenAI Realtime session failed: {e}") from e
        self._closed = True

    @staticmethod
    def parse_event(data: Dict[str, Any]) -> SpeechEvent:
        t = data.get("type")
        if t in LOG_EVENT_TYPES:
            logger.info("OpenAI event", openai_event=t)

        if t in AUDIO_DELTA_TYPES and data.get("delta"):
            return AudioDelta(item_id=data.get("item_id"), payload=data["delta"])
        if t == "input_audio_buffer.speech_started":
            return SpeechStarted()
        if t == "session.created":
            return SessionCreated(session_id=(data.get("session") or {}).get("id"))
        if t == "error":
            error = data.get("error") or {}
            return SpeechError(code=error.get("code"), message=error.get("message"))
        return OtherSpeechEvent(type=t, raw=data)

    async def configure(self, session_update: Optional[Dict[str, Any]] = None) -> None:
        """Push the one-time session.update (built from session_config by default)."""
        if session_update is None:
            session_update = OpenAIService.build_session_update(self.session_config)
        logger.debug("Sending session update", voice=self.session_config.voice)
        await self._send(session_update)

    async def send_audio(self, payload: str) -> bool:
        """Append caller audio; dropped (returns False) until the session is open."""
        if self._connection is None:
            logger.debug("Dropping caller audio; OpenAI session not open yet")
            return False
        await self._send(OpenAIService.build_audio_append(payload))
        return True

    async def truncate(self, item_id: str, content_index: int, audio_end_ms: int) -> None:
        await self._send(OpenAIService.build_truncate(item_id, content_index, audio_end_ms))

    async def create_initial_greeting(self) -> None:
        """Seed the conversation so the assistant speaks first."""
        await self._send(OpenAIService.build_initial_conversation_item(self.session_config.initial_greeting))
        await self._send(OpenAIService.build_response_create())

    async def _send(self, event: Dict[str, Any]) -> None:
        if not self.is_open:
            raise ConnectionClosed(f"OpenAI Realtime session closed; cannot send {event['type']}")
        try:
            await self._connection.send(event)
        except WebSocketConnectionClosed as e:
            self._closed = True
            raise ConnectionClosed(f"OpenAI Realtime session closed while sending {event['type']}") from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._connection is not None:
                try:
                    await self._connection.close()
                except WebSocketException as e:
                    logger.debug("OpenAI Realtime close failed", error=str(e))
        finally:
            # The client owns an HTTP connection pool; release it with the session
            if self._client is not None:
                await self._client.close()
