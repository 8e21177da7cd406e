"""
Per-call bridge between a Twilio media stream and an OpenAI Realtime session.

Two tasks drain the two connections:
  1) twilio->openai: caller audio, stream start/stop and mark acknowledgments
  2) openai->twilio: assistant audio, barge-in detection and session readiness

Every event is handled under one lock so the shared CallState is never
observed half-updated. When either task ends, the other connection is closed
and the bridge is done; instances are not reused.
"""
import asyncio
from typing import Optional

from config import MARK_NAME, SESSION_INIT_DELAY_MS
from logging_config import get_logger
from models import (
    AudioDelta,
    CallState,
    MarkEvent,
    MediaEvent,
    SessionCreated,
    SpeechError,
    SpeechStarted,
    StartEvent,
    StopEvent,
)
from openai_client import RealtimeSession, SpeechEvent
from twilio_stream import TwilioConnection, TwilioEvent
from utils import safe_task

logger = get_logger(__name__)


class SessionBridge:
    """Relays audio both ways and runs the interruption protocol for one call."""

    def __init__(
        self,
        telephony: TwilioConnection,
        speech: RealtimeSession,
        state: Optional[CallState] = None,
        init_delay_ms: int = SESSION_INIT_DELAY_MS,
    ):
        self.telephony = telephony
        self.speech = speech
        self.state = state if state is not None else CallState()
        self.init_delay_ms = init_delay_ms
        self.close_reason: Optional[BaseException] = None
        self.log = logger
        self._lock = asyncio.Lock()
        self._session_initialized = False
        self._started = False

    async def run(self) -> None:
        """Bridge both connections until either side closes or fails."""
        if self._started:
            raise RuntimeError("SessionBridge instances are single-use")
        self._started = True

        recv_task = asyncio.create_task(
            safe_task(self.receive_from_twilio(), "twilio->openai", logger), name="twilio->openai"
        )
        send_task = asyncio.create_task(
            safe_task(self.send_to_twilio(), "openai->twilio", logger), name="openai->twilio"
        )
        try:
            done, _ = await asyncio.wait({recv_task, send_task}, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if self.close_reason is None:
                    self.close_reason = task.result()
        finally:
            for task in (recv_task, send_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(recv_task, send_task, return_exceptions=True)
            await self.close()
        self.log.info("Call ended", reason=repr(self.close_reason) if self.close_reason else "closed")

    async def close(self) -> None:
        try:
            await self.speech.close()
        finally:
            await self.telephony.close()

    # =============================
    # Twilio -> OpenAI
    # =============================
    async def receive_from_twilio(self) -> None:
        async for event in self.telephony.events():
            async with self._lock:
                await self.handle_twilio_event(event)

    async def handle_twilio_event(self, event: TwilioEvent) -> None:
        state = self.state
        if isinstance(event, MediaEvent):
            state.latest_media_timestamp = event.timestamp
            await self.speech.send_audio(event.payload)

        elif isinstance(event, StartEvent):
            state.reset_for_stream(event.stream_sid)
            self.log = logger.bind(stream_sid=event.stream_sid)
            self.log.info("Incoming stream started")

        elif isinstance(event, MarkEvent):
            if state.mark_queue:
                state.mark_queue.pop(0)

        elif isinstance(event, StopEvent):
            self.log.info("Twilio stream stopped")

        else:
            self.log.debug("Ignoring Twilio event", twilio_event=event.name)

    # =============================
    # OpenAI -> Twilio
    # =============================
    async def send_to_twilio(self) -> None:
        await self.speech.connect()
        async for event in self.speech.events():
            if isinstance(event, SessionCreated) and not self._session_initialized and self.init_delay_ms > 0:
                # Caller audio and marks keep flowing during the wait
                await asyncio.sleep(self.init_delay_ms / 1000)
            async with self._lock:
                await self.handle_speech_event(event)

    async def handle_speech_event(self, event: SpeechEvent) -> None:
        if isinstance(event, AudioDelta):
            await self.forward_audio_delta(event)

        elif isinstance(event, SpeechStarted):
            await self.handle_speech_started_event()

        elif isinstance(event, SessionCreated):
            await self.initialize_session()

        elif isinstance(event, SpeechError):
            self.log.error("OpenAI error event", code=event.code, message=event.message)

    async def initialize_session(self) -> None:
        """Send session.update then the greeting, once per session."""
        if self._session_initialized:
            return
        self._session_initialized = True
        await self.speech.configure()
        await self.speech.create_initial_greeting()
        self.log.info("OpenAI session initialized", voice=self.speech.session_config.voice)

    async def forward_audio_delta(self, event: AudioDelta) -> None:
        state = self.state
        await self.telephony.send_media(state.stream_sid, event.payload)
        # Playback start on the caller's clock, used for truncation math
        if state.response_start_timestamp_twilio is None:
            state.response_start_timestamp_twilio = state.latest_media_timestamp
        if event.item_id:
            state.last_assistant_item = event.item_id
        await self.send_mark()

    async def send_mark(self) -> None:
        sid = self.state.stream_sid
        if sid:
            await self.telephony.send_mark(sid, MARK_NAME)
            self.state.mark_queue.append(MARK_NAME)

    async def handle_speech_started_event(self) -> None:
        """
        Barge-in: the caller talked over assistant audio. Truncate the item at
        what was actually heard and flush Twilio's playback buffer. No-op when
        no utterance is being played.
        """
        state = self.state
        if not state.is_responding:
            return

        elapsed = max(0, state.latest_media_timestamp - state.response_start_timestamp_twilio)
        if state.last_assistant_item:
            self.log.debug("Truncating assistant item", item_id=state.last_assistant_item, audio_end_ms=elapsed)
            await self.speech.truncate(state.last_assistant_item, 0, elapsed)

        await self.telephony.send_clear(state.stream_sid)
        state.clear_response()
