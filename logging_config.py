"""
Structured logging configuration.

Sets up structlog on top of stdlib logging so uvicorn/fastapi records and our
own events share one renderer (JSON or colorized console).
"""
import logging
import sys

import structlog
from structlog import dev as structlog_dev

from config import LOG_LEVEL, LOG_FORMAT

SENSITIVE_KEYS = {"api_key", "apikey", "authorization", "token", "secret", "password"}


def sanitize_secrets(logger, method_name, event_dict):
    """Redact values whose key looks like a credential."""
    for key in list(event_dict.keys()):
        normalized = str(key).lower().replace("-", "_")
        if normalized in SENSITIVE_KEYS or normalized.endswith("_key"):
            value = event_dict[key]
            if isinstance(value, str) and len(value) > 4:
                event_dict[key] = f"{value[:2]}***REDACTED***"
            elif value is not None:
                event_dict[key] = "***REDACTED***"
    return event_dict


def configure_logging(log_level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    """
    Configure structlog and the stdlib root logger.

    log_format: "json" or "console".
    """
    level_value = getattr(logging, str(log_level).upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            sanitize_secrets,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_format.strip().lower() == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog_dev.ConsoleRenderer(colors=sys.stdout.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level_value)

    # Reduce noisy third-party loggers
    for name in ("websockets", "websockets.client", "httpx", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str):
    """Get a structlog logger."""
    return structlog.get_logger(name)
