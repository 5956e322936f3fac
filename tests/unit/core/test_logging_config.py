"""Unit tests for structured logging setup."""

from __future__ import annotations

import json

import structlog

from core.logging_config import configure_logging, get_logger


def test_get_logger_configures_defaults_on_first_use(capsys) -> None:
    """Loggers obtained before explicit setup still emit JSON on stderr."""
    structlog.reset_defaults()
    try:
        logger = get_logger("relayscope.sdk")
        logger.info("sdk_event", value=3)

        assert structlog.is_configured()
        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["event"] == "sdk_event"
        assert event["level"] == "info" and event["value"] == 3
    finally:
        configure_logging("DEBUG")


def test_get_logger_keeps_explicit_configuration(capsys) -> None:
    """An explicit level set before first use is not overwritten."""
    configure_logging("WARNING")
    try:
        logger = get_logger("relayscope.sdk")
        logger.info("hidden_event")
        logger.warning("shown_event")

        lines = capsys.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["shown_event"]
    finally:
        configure_logging("DEBUG")
