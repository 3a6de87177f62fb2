"""Tests for logging configuration."""

import json
import logging

from clerk_sync.logging_config import (
    NamespaceFilter,
    StructuredFormatter,
    clear_request_context,
    get_logger,
    request_id_var,
    set_request_context,
    user_id_var,
    webhook_id_var,
)


def _record(name: str = "test", level: int = logging.INFO, msg: str = "Test message"):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestStructuredFormatter:
    """Test StructuredFormatter class."""

    def test_formats_as_json(self):
        """Test that logs are formatted as JSON."""
        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["level"] == "info"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "test"
        assert parsed["service"] == "test"
        assert "ts" in parsed

    def test_includes_context_variables(self):
        """Test that context variables are included."""
        set_request_context(request_id="req_123", webhook_id="msg_456", user_id="user_789")
        try:
            parsed = json.loads(StructuredFormatter().format(_record()))
        finally:
            clear_request_context()

        assert parsed["request_id"] == "req_123"
        assert parsed["webhook_id"] == "msg_456"
        assert parsed["user_id"] == "user_789"

    def test_includes_extra_fields(self):
        """Test that extra fields are included."""
        record = _record(name="webhooks")
        record.event_type = "user.created"
        record.outcome = "created"
        record.duration_ms = 12
        record.metadata = {"missing": ["svix-id"]}

        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["service"] == "webhooks"
        assert parsed["event_type"] == "user.created"
        assert parsed["outcome"] == "created"
        assert parsed["duration_ms"] == 12
        assert parsed["metadata"] == {"missing": ["svix-id"]}

    def test_skips_none_extra_fields(self):
        record = _record()
        record.error_code = None

        assert "error_code" not in json.loads(StructuredFormatter().format(record))


class TestContextFunctions:
    """Test context management functions."""

    def test_set_and_clear_context(self):
        clear_request_context()

        assert request_id_var.get() is None
        assert webhook_id_var.get() is None
        assert user_id_var.get() is None

        set_request_context(request_id="req_123", webhook_id="msg_456")
        # Partial updates leave other values alone
        set_request_context(user_id="user_789")

        assert request_id_var.get() == "req_123"
        assert webhook_id_var.get() == "msg_456"
        assert user_id_var.get() == "user_789"

        clear_request_context()

        assert request_id_var.get() is None
        assert webhook_id_var.get() is None
        assert user_id_var.get() is None


class TestNamespaceFilter:
    """Test NamespaceFilter class."""

    def test_allows_info_level(self):
        assert NamespaceFilter(debug_namespaces=[]).filter(_record(name="users.store")) is True

    def test_filters_debug_by_namespace(self):
        """Test that DEBUG logs are filtered by namespace."""
        namespace_filter = NamespaceFilter(debug_namespaces=["webhooks"])

        assert namespace_filter.filter(_record(name="webhooks", level=logging.DEBUG)) is True
        assert namespace_filter.filter(_record(name="users.sync", level=logging.DEBUG)) is False


class TestGetLogger:
    def test_returns_logger(self):
        logger = get_logger("webhooks")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "webhooks"
