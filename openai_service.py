"""
OpenAI Realtime client events used by the bridge.
"""
from typing import Any, Dict

from models import SessionConfig


class OpenAIService:
    """Builds the client->server event payloads for an OpenAI realtime session."""

    @staticmethod
    def build_session_update(session_config: SessionConfig) -> Dict[str, Any]:
        """One-time session.update carrying voice, instructions and audio formats."""
        return {
            "type": "session.update",
            "session": {
                "turn_detection": {"type": session_config.turn_detection_mode},
                "input_audio_format": session_config.input_audio_format,
                "output_audio_format": session_config.output_audio_format,
                "voice": session_config.voice,
                "instructions": session_config.instructions,
                "modalities": list(session_config.modalities),
                "temperature": session_config.temperature,
            },
        }

    @staticmethod
    def build_initial_conversation_item(text: str) -> Dict[str, Any]:
        """Synthetic user turn that makes the assistant open the dialogue."""
        return {
            "type": "conversation.item.create",
            "item": {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": text}],
            },
        }

    @staticmethod
    def build_response_create() -> Dict[str, Any]:
        return {"type": "response.create"}

    @staticmethod
    def build_audio_append(payload: str) -> Dict[str, Any]:
        return {"type": "input_audio_buffer.append", "audio": payload}

    @staticmethod
    def build_truncate(item_id: str, content_index: int, audio_end_ms: int) -> Dict[str, Any]:
        """Tell the model only the first audio_end_ms of an item reached the caller."""
        return {
            "type": "conversation.item.truncate",
            "item_id": item_id,
            "content_index": content_index,
            "audio_end_ms": audio_end_ms,
        }
