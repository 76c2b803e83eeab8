import json
import logging
import sys

from dbsampler.common.logger import (
    ExportContextFilter,
    JsonFormatter,
    configure_logging,
    current_export_id,
    export_context,
)


class TestStructuredLogging:

    def test_json_formatter_includes_export_id_and_extras(self):
        # Arrange
        configure_logging(json_format=True)
        handler = logging.getLogger().handlers[0]
        record = logging.LogRecord("dbsampler.sampler", logging.INFO, "path", 1, "wrote rows", {}, None)
        record.row_count = 12

        # Act
        with export_context("exp-123"):
            handler.filter(record)
            data = json.loads(handler.formatter.format(record))

        # Assert
        assert isinstance(handler.formatter, JsonFormatter)
        assert data["message"] == "wrote rows"
        assert data["level"] == "INFO"
        assert data["export_id"] == "exp-123"
        assert data["row_count"] == 12

    def test_json_formatter_includes_exception(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, "path", 1, "failed", {}, sys.exc_info())

        data = json.loads(formatter.format(record))

        assert "ValueError: boom" in data["exception"]

    def test_text_format_is_default(self):
        configure_logging(level="DEBUG")

        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_export_context_resets_after_exit():
    # Arrange
    record = logging.LogRecord("x", logging.INFO, "path", 1, "msg", {}, None)

    # Act
    with export_context("outer"):
        with export_context("inner"):
            assert current_export_id() == "inner"
        assert current_export_id() == "outer"

    # Assert
    ExportContextFilter().filter(record)
    assert record.export_id is None
    assert current_export_id() is None
