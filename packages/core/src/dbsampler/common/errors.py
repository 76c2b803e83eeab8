from enum import Enum
from typing import Any, Optional

import jinja2
from pydantic import BaseModel, ConfigDict

from dbsampler_adapter_sdk import (
    ConnectError,
    CursorClosedError,
    ParameterMismatchError,
    QueryError,
    QueryTimeout,
)


class ErrorCode(str, Enum):
    """Standardized error codes for sampling and export."""
    CONNECT_FAILED = "CONNECT_FAILED"
    QUERY_FAILED = "QUERY_FAILED"
    QUERY_TIMEOUT = "QUERY_TIMEOUT"
    PARAMETER_MISMATCH = "PARAMETER_MISMATCH"
    CURSOR_CLOSED = "CURSOR_CLOSED"
    TEMPLATE_ERROR = "TEMPLATE_ERROR"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    OUTPUT_ERROR = "OUTPUT_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


RETRYABLE_ERRORS = {
    ErrorCode.CONNECT_FAILED,
    ErrorCode.QUERY_TIMEOUT,
}

SAFE_ERROR_MESSAGES = {
    ErrorCode.CONNECT_FAILED: "Could not connect to the database.",
    ErrorCode.UNKNOWN_ERROR: "An unexpected error occurred.",
}


class SamplerError(BaseModel):
    """Represents a structured error surfaced by a sampling or export run.

    Attributes:
        operation (str): The operation that failed (e.g. ``export_table``).
        message (str): A human-readable error message.
        error_code (ErrorCode): The standardized error code.
        backend_code (Optional[str]): Driver error code such as a SQLSTATE.
        details (Optional[Any]): Additional context or metadata.
    """
    model_config = ConfigDict(extra="ignore")

    operation: str
    message: str
    error_code: ErrorCode
    backend_code: Optional[str] = None
    details: Optional[Any] = None

    @property
    def is_retryable(self) -> bool:
        """Whether re-running the same operation could succeed."""
        return self.error_code in RETRYABLE_ERRORS

    def get_safe_message(self) -> str:
        """Returns a sanitized error message safe for display.

        Connection failures can echo credentials from the URL, so they map
        to a fixed message. Everything else keeps its original message.
        """
        return SAFE_ERROR_MESSAGES.get(self.error_code, self.message)


def _code_for(exc: BaseException) -> ErrorCode:
    # Order matters: subclasses before their bases.
    if isinstance(exc, ConnectError):
        return ErrorCode.CONNECT_FAILED
    if isinstance(exc, QueryTimeout):
        return ErrorCode.QUERY_TIMEOUT
    if isinstance(exc, ParameterMismatchError):
        return ErrorCode.PARAMETER_MISMATCH
    if isinstance(exc, CursorClosedError):
        return ErrorCode.CURSOR_CLOSED
    if isinstance(exc, QueryError):
        return ErrorCode.QUERY_FAILED
    if isinstance(exc, jinja2.TemplateNotFound):
        return ErrorCode.TEMPLATE_NOT_FOUND
    if isinstance(exc, jinja2.TemplateError):
        return ErrorCode.TEMPLATE_ERROR
    if isinstance(exc, FileNotFoundError):
        return ErrorCode.TEMPLATE_NOT_FOUND
    if isinstance(exc, OSError):
        return ErrorCode.OUTPUT_ERROR
    if isinstance(exc, ValueError):
        return ErrorCode.CONFIG_ERROR
    return ErrorCode.UNKNOWN_ERROR


def classify_error(exc: BaseException, operation: str) -> SamplerError:
    """Maps an exception raised by a sampling operation to a SamplerError."""
    details = None
    if isinstance(exc, FileNotFoundError) and exc.filename:
        details = {"path": str(exc.filename)}
    elif isinstance(exc, jinja2.TemplateSyntaxError):
        details = {"line": exc.lineno}

    return SamplerError(
        operation=operation,
        message=str(exc) or type(exc).__name__,
        error_code=_code_for(exc),
        backend_code=getattr(exc, "code", None) if isinstance(exc, QueryError) else None,
        details=details,
    )
