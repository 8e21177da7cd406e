"""
Configuration and constants for the Twilio <-> OpenAI Realtime bridge.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# =============================
# Server Configuration
# =============================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 5050))

# =============================
# OpenAI Configuration
# =============================
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_REALTIME_MODEL = os.getenv("OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview-2024-10-01")
VOICE = os.getenv("VOICE", "alloy")
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.8"))

# Twilio media streams carry 8kHz mu-law, passed through untouched
INPUT_AUDIO_FORMAT = os.getenv("INPUT_AUDIO_FORMAT", "g711_ulaw")
OUTPUT_AUDIO_FORMAT = os.getenv("OUTPUT_AUDIO_FORMAT", "g711_ulaw")
TURN_DETECTION_MODE = "server_vad"
MODALITIES = ["text", "audio"]

SPEECH_CONNECT_TIMEOUT_S = float(os.getenv("SPEECH_CONNECT_TIMEOUT_S", "10"))
# Optional wait between session.created and session.update
SESSION_INIT_DELAY_MS = int(os.getenv("SESSION_INIT_DELAY_MS", "0"))

# =============================
# Logging Configuration
# =============================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")

# =============================
# Application Constants
# =============================
SYSTEM_MESSAGE = """
## Identity
You are a primary customer support consultant for a D2C brand specializing in clothing store.
You handle all incoming queries: order tracking, returns, inquiry, refunds, exchanges, product info, payment questions, and general assistance.

## Language Handling
- Automatically detect and reply in the customer's language (Hindi or English).
- If Hindi: always use polite, professional Hindi ("aap / hum").
- If English: use warm and professional tone.
- Do not copy customer spelling mistakes or shorthand; always respond with correct, natural phrasing.

## Knowledge Scope
- You only know about the clothing store, orders, returns, inquiry, refunds, exchanges, and payments related to this store.
- If the user asks about unrelated topics, politely decline and redirect:
  "I may not be the best source for that, but I can definitely help you with your order or product-related questions."

## Style & Tone
- Speak warmly, like a real human consultant. Patient, professional, and empathetic.
- Acknowledge frustration briefly before moving into process.
- Keep replies short, natural, and conversational. Never sound robotic or scripted.
- If the customer expresses a complaint, start with a brief, genuine empathy line like:
  "I'm really sorry that wasn't up to the mark. We'll get this sorted out."

## Error Handling
- If something fails or returns incomplete data, apologize naturally:
  "Sorry, something went wrong while checking that. Let me try again."
- If the issue cannot be resolved after retry, escalate to a human agent.
"""

INITIAL_GREETING = "Hello! How can I assist you today?"

# Name carried by every mark sent after an audio chunk
MARK_NAME = "responsePart"

LOG_EVENT_TYPES = [
    "error",
    "response.content.done",
    "rate_limits.updated",
    "response.done",
    "input_audio_buffer.committed",
    "input_audio_buffer.speech_stopped",
    "input_audio_buffer.speech_started",
    "session.created",
    "session.updated",
]

# =============================
# Twilio Configuration
# =============================
HOLD_MESSAGE = "Please wait while we connect your call to the AI assistant."
READY_MESSAGE = "Okay, you can start talking!"
MEDIA_STREAM_PATH = "/media-stream"
