# file: main.py
from typing import Optional

from fastapi import FastAPI

from config import HOST, PORT, OPENAI_API_KEY
from logging_config import configure_logging, get_logger
from routes import Routes
from websocket_handler import WebSocketHandler

logger = get_logger(__name__)


def create_app(ws_handler: Optional[WebSocketHandler] = None) -> FastAPI:
    app = FastAPI(title="Twilio Realtime Voice Bridge")
    Routes(app, ws_handler or WebSocketHandler())
    return app


app = create_app()


def main():
    import uvicorn

    configure_logging()
    if not OPENAI_API_KEY:
        raise ValueError("Missing the OpenAI API key. Please set it in the .env file.")
    logger.info("Server is starting", host=HOST, port=PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
