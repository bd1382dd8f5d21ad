"""
Unit tests for structlog configuration.
"""

import io
import json

import pytest
import structlog

from slate_recommender.logging_config import SERVICE_NAME, setup_logging


@pytest.fixture
def stream():
    buffer = io.StringIO()
    yield buffer
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestSetupLogging:
    """Test setup_logging."""

    def test_json_events_carry_service_and_context(self, stream):
        setup_logging(level="info", json_output=True, stream=stream)
        structlog.contextvars.bind_contextvars(request_id="req-1")

        structlog.get_logger("test").info("slate_built", items_count=3)

        event = json.loads(stream.getvalue().strip())
        assert event["event"] == "slate_built"
        assert event["service"] == SERVICE_NAME
        assert event["request_id"] == "req-1"
        assert event["items_count"] == 3
        assert event["level"] == "info"

    def test_level_filters_events(self, stream):
        setup_logging(level="warning", json_output=True, stream=stream)
        logger = structlog.get_logger("test")

        logger.info("ignored")
        logger.warning("kept")

        lines = stream.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["kept"]
