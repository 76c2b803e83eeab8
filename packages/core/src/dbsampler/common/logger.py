import logging
import json
import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional

_export_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("export_id", default=None)


class ExportContextFilter(logging.Filter):
    """Injects export_id from contextvar into the log record."""
    def filter(self, record):
        record.export_id = _export_id_ctx.get()
        return True


@contextmanager
def export_context(export_id: str) -> Iterator[str]:
    """Context manager to set the export_id for the current context."""
    token = _export_id_ctx.set(export_id)
    try:
        yield export_id
    finally:
        _export_id_ctx.reset(token)


def current_export_id() -> Optional[str]:
    return _export_id_ctx.get()


class JsonFormatter(logging.Formatter):
    """Formatter that outputs JSON strings after parsing the LogRecord."""

    # Standard LogRecord attributes to ignore
    standard_attrs = {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "module",
        "msecs", "message", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread", "threadName",
        "taskName", "export_id"
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formats the log record as a JSON string.

        Args:
           record (logging.LogRecord): The log record to format.

        Returns:
            str: The JSON-formatted log string.
        """
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "export_id", None):
            log_record["export_id"] = record.export_id

        for key, value in record.__dict__.items():
            if key not in self.standard_attrs and not key.startswith("_"):
                log_record[key] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False):
    """Configures the root logger.

    Args:
        level (str): The logging level (default: INFO).
        json_format (bool): Whether to use JSON formatting (default: False).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(ExportContextFilter())

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - [%(export_id)s] - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Gets a named logger.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The logger instance.
    """
    return logging.getLogger(name)
