"""Logging configuration for the Jimeng orchestration service."""

from __future__ import annotations

import logging
from typing import Any

import structlog

SERVICE_NAME = "jimeng-images"

# Per-request transport chatter; provider calls are logged by the gateway.
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def add_service_name(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every structured event with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure stdlib logging and structlog processors."""
    logging.basicConfig(
        level=level,
        format=f"%(asctime)s %(levelname)s {SERVICE_NAME} %(name)s %(message)s",
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            add_service_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
