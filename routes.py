"""
FastAPI routes for handling Twilio webhooks and the media stream.
"""
from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import HTMLResponse, JSONResponse
from twilio.twiml.voice_response import VoiceResponse, Connect

from config import HOLD_MESSAGE, READY_MESSAGE, MEDIA_STREAM_PATH
from logging_config import get_logger
from websocket_handler import WebSocketHandler

logger = get_logger(__name__)


class Routes:
    """Contains all FastAPI route handlers."""

    def __init__(self, app: FastAPI, ws_handler: WebSocketHandler):
        self.app = app
        self.ws_handler = ws_handler
        self._setup_routes()

    def _setup_routes(self):
        """Setup all route handlers."""
        self.app.get("/", response_class=JSONResponse)(self.index_page)
        self.app.api_route("/incoming-call", methods=["GET", "POST"])(self.handle_incoming_call)
        self.app.websocket(MEDIA_STREAM_PATH)(self.media_stream)

    async def index_page(self):
        """Root endpoint returning status information."""
        return {"message": "Twilio Media Stream Server is running!"}

    async def handle_incoming_call(self, request: Request):
        """Answer Twilio's voice webhook with TwiML that streams the call to us."""
        host = request.headers.get("host") or request.url.hostname
        stream_url = f"wss://{host}{MEDIA_STREAM_PATH}"

        response = VoiceResponse()
        response.say(HOLD_MESSAGE)
        response.pause(length=1)
        response.say(READY_MESSAGE)
        connect = Connect()
        connect.stream(url=stream_url)
        response.append(connect)
        logger.info("Incoming call", stream_url=stream_url)
        return HTMLResponse(content=str(response), media_type="application/xml")

    async def media_stream(self, websocket: WebSocket):
        await self.ws_handler.handle_media_stream(websocket)
