"""
Utility functions for the voice bridge.
"""
import json
from typing import Dict, Any, Optional, Union

from exceptions import BridgeError
from logging_config import get_logger

logger = get_logger(__name__)


def normalize_event_to_dict(event: Any) -> Dict[str, Any]:
    """Convert various event formats (SDK models, JSON text, dicts) to a dictionary."""
    if isinstance(event, dict):
        return event
    if isinstance(event, (str, bytes, bytearray)):
        parsed = parse_json_frame(event)
        return parsed if parsed is not None else {"type": "unknown", "raw": repr(event)}

    model_dump = getattr(event, "model_dump", None)
    if callable(model_dump):
        try:
            return model_dump()
        except Exception:
            logger.debug("model_dump failed", event_class=type(event).__name__)

    data_attr = getattr(event, "data", None)
    if isinstance(data_attr, dict):
        return data_attr

    return {"type": "unknown", "raw": repr(event)}


def parse_json_frame(frame: Union[str, bytes, bytearray]) -> Optional[Dict[str, Any]]:
    """Parse one JSON text frame; None when it is not a JSON object."""
    try:
        data = json.loads(frame if isinstance(frame, str) else frame.decode())
    except (ValueError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


async def safe_task(coro, name: str, log=None) -> Optional[BaseException]:
    """
    Await a call-scoped coroutine, logging instead of propagating its failure.

    Returns the exception that ended the coroutine, or None on a clean finish.
    """
    log = log or logger
    try:
        await coro
    except BridgeError as e:
        log.warning("Task ended on connection failure", task=name, error=str(e))
        return e
    except Exception as e:
        log.error("Task error", task=name, error=str(e), exc_info=True)
        return e
    return None
