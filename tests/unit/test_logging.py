"""Tests for structured logging."""
import io
import json
import logging

import pytest
from pythonjsonlogger.json import JsonFormatter

from node_sdk.observability import NodeContextFilter, setup_logging, with_node_context


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test log output configuration."""

    def test_json_lines_carry_node_context(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("NODEPACK_LOG_JSON", "true")
        stream = io.StringIO()
        setup_logging(stream)

        logging.getLogger("nodepacks.saas.typeform").info(
            "Stored webhook id",
            extra=with_node_context(workflow_id="wf-1", node_type="typeformTrigger"),
        )

        record = json.loads(stream.getvalue().strip())
        assert record["message"] == "Stored webhook id"
        assert record["level"] == "INFO"
        assert record["logger"] == "nodepacks.saas.typeform"
        assert record["workflow_id"] == "wf-1"
        assert record["node_type"] == "typeformTrigger"
        assert "node_name" not in record

    def test_json_formatter_comes_from_current_module(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("NODEPACK_LOG_JSON", "true")
        setup_logging(io.StringIO())

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, JsonFormatter)

    def test_plain_text_output(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("NODEPACK_LOG_JSON", "false")
        stream = io.StringIO()
        setup_logging(stream)

        logging.getLogger("node_sdk").warning("careful")

        assert "[WARNING] node_sdk: careful" in stream.getvalue()

    def test_level_from_settings(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("NODEPACK_LOG_LEVEL", "error")
        setup_logging(io.StringIO())

        assert logging.getLogger().level == logging.ERROR


def test_context_filter_fills_missing_fields():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    assert NodeContextFilter().filter(record) is True
    assert record.workflow_id is None
    assert record.node_name is None


def test_with_node_context_skips_empty_values():
    assert with_node_context(node_name="Typeform Trigger", attempt=2) == {
        "node_name": "Typeform Trigger",
        "attempt": 2,
    }
