"""
Twilio Media Streams side of the bridge.
"""
from typing import Any, AsyncIterator, Dict, Optional, Union

from fastapi import WebSocket
from fastapi.websockets import WebSocketDisconnect
from starlette.websockets import WebSocketState

from exceptions import ConnectionClosed
from logging_config import get_logger
from models import MarkEvent, MediaEvent, StartEvent, StopEvent, UnknownEvent
from utils import parse_json_frame

logger = get_logger(__name__)

TwilioEvent = Union[StartEvent, MediaEvent, MarkEvent, StopEvent, UnknownEvent]


class TwilioConnection:
    """
    Wraps an accepted Twilio media-stream WebSocket: parses inbound frames
    into events and serializes outbound media/clear/mark messages.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def events(self) -> AsyncIterator[TwilioEvent]:
        """
        Yield inbound events until Twilio sends `stop` or the caller hangs up.
        Malformed frames, text or binary, are logged and skipped.
        """
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Twilio WebSocket disconnected", code=message.get("code"))
                break
            frame = message.get("text")
            if frame is None:
                frame = message.get("bytes") or b""
            data = parse_json_frame(frame)
            if data is None:
                logger.warning("Dropping non-JSON Twilio frame", frame=repr(frame[:200]))
                continue
            event = self.parse_event(data)
            if event is None:
                continue
            yield event
            if isinstance(event, StopEvent):
                return
        self._closed = True

    @staticmethod
    def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
        """The nested object Twilio sends under `key`; TypeError when it is not one."""
        section = data.get(key)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise TypeError(f"{key} is {type(section).__name__}, expected object")
        return section

    @staticmethod
    def parse_event(data: Dict[str, Any]) -> Optional[TwilioEvent]:
        """Map one decoded Twilio message to an event; None when it is malformed."""
        name = data.get("event")
        try:
            if name == "start":
                start = TwilioConnection._section(data, "start")
                stream_sid = start.get("streamSid") or data.get("streamSid")
                if not stream_sid:
                    raise KeyError("streamSid")
                return StartEvent(stream_sid=stream_sid)
            if name == "media":
                media = TwilioConnection._section(data, "media")
                return MediaEvent(timestamp=int(media["timestamp"]), payload=media["payload"])
            if name == "mark":
                return MarkEvent(name=TwilioConnection._section(data, "mark").get("name"))
            if name == "stop":
                return StopEvent()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Twilio event", twilio_event=name, error=repr(e))
            return None
        return UnknownEvent(name=name, raw=data)

    async def send_media(self, stream_sid: Optional[str], payload: str) -> None:
        await self._send({"event": "media", "streamSid": stream_sid, "media": {"payload": payload}})

    async def send_clear(self, stream_sid: Optional[str]) -> None:
        await self._send({"event": "clear", "streamSid": stream_sid})

    async def send_mark(self, stream_sid: Optional[str], name: str) -> None:
        await self._send({"event": "mark", "streamSid": stream_sid, "mark": {"name": name}})

    async def _send(self, message: Dict[str, Any]) -> None:
        if not self.is_open:
            raise ConnectionClosed(f"Twilio WebSocket closed; cannot send {message['event']}")
        try:
            await self.websocket.send_json(message)
        except (WebSocketDisconnect, RuntimeError) as e:
            self._closed = True
            raise ConnectionClosed(f"Twilio WebSocket closed while sending {message['event']}") from e

    async def close(self) -> None:
        self._closed = True
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close()
        except Exception as e:
            # Client already went away; nothing left to close
            logger.debug("Twilio WebSocket close skipped", error=str(e))
