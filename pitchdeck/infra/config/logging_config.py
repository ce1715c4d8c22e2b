"""
Structlog configuration and helpers.

Every record carries the service name and environment. The backend credential
is masked wherever it shows up in an event, since LLM and realtime errors tend
to echo request details.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import structlog

from pitchdeck.infra.config.settings import Settings

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai", "websockets")

REDACTED = "***"


def add_service_fields(service: str, environment: str):
    def processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def redact_secret(secret: Optional[str]):
    """Replace ``secret`` inside any string value of the event."""
    secret = (secret or "").strip()

    def processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        if len(secret) < 8:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str) and secret in value:
                event_dict[key] = value.replace(secret, REDACTED)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog from settings (``LOG_LEVEL``, ``LOG_FORMAT``)."""
    level = getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO)
    fmt = (settings.log_format or "json").lower()

    logging.basicConfig(format="%(message)s", level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer(sort_keys=True, ensure_ascii=False)
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_service_fields(settings.app_name, settings.environment),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secret(settings.openai_api_key),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:  # type: ignore[name-defined]
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def bind_context(**kwargs) -> None:
    """Bind contextvars for correlation (request_id, path, voice session)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
