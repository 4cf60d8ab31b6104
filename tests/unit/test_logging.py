from __future__ import annotations

import logging

import pytest
import structlog

from jimeng_images.logging import SERVICE_NAME, add_service_name, configure_logging

pytestmark = pytest.mark.unit


def test_add_service_name_keeps_explicit_value() -> None:
    assert add_service_name(None, "info", {"event": "x"})["service"] == SERVICE_NAME
    assert add_service_name(None, "info", {"event": "x", "service": "other"})["service"] == "other"


def test_configure_logging_quiets_transport_loggers() -> None:
    httpx_logger = logging.getLogger("httpx")
    previous = httpx_logger.level
    try:
        configure_logging("DEBUG")
        assert httpx_logger.level == logging.WARNING
        assert add_service_name in structlog.get_config()["processors"]
    finally:
        httpx_logger.setLevel(previous)
        structlog.reset_defaults()
