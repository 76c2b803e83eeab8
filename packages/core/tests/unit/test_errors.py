import jinja2
import pytest

from dbsampler.common.errors import ErrorCode, SamplerError, classify_error
from dbsampler_adapter_sdk import (
    ConnectError,
    CursorClosedError,
    ParameterMismatchError,
    QueryError,
    QueryTimeout,
)


@pytest.mark.parametrize(
    "exc, code",
    [
        (ConnectError("refused"), ErrorCode.CONNECT_FAILED),
        (QueryTimeout("slow", code="57014"), ErrorCode.QUERY_TIMEOUT),
        (ParameterMismatchError("2 vs 1"), ErrorCode.PARAMETER_MISMATCH),
        (CursorClosedError("closed"), ErrorCode.CURSOR_CLOSED),
        (QueryError("bad sql", code="42601"), ErrorCode.QUERY_FAILED),
        (jinja2.TemplateSyntaxError("unexpected end", 3), ErrorCode.TEMPLATE_ERROR),
        (jinja2.UndefinedError("'table' is undefined"), ErrorCode.TEMPLATE_ERROR),
        (FileNotFoundError(2, "No such file", "q.sql.j2"), ErrorCode.TEMPLATE_NOT_FOUND),
        (PermissionError(13, "Permission denied"), ErrorCode.OUTPUT_ERROR),
        (ValueError("DATABASE_URL is missing"), ErrorCode.CONFIG_ERROR),
        (RuntimeError("???"), ErrorCode.UNKNOWN_ERROR),
    ],
)
def test_classify_error_codes(exc, code):
    assert classify_error(exc, "export_table").error_code == code


def test_classify_keeps_backend_code_and_operation():
    # Act
    error = classify_error(QueryError("relation missing", code="42P01"), "export_query_file")

    # Assert
    assert error.operation == "export_query_file"
    assert error.backend_code == "42P01"
    assert error.message == "relation missing (code: 42P01)"


def test_classify_records_missing_path():
    error = classify_error(FileNotFoundError(2, "No such file", "q.sql.j2"), "export_query_file")

    assert error.details == {"path": "q.sql.j2"}


def test_connect_failures_get_a_safe_message():
    error = classify_error(ConnectError("password authentication failed for user app:s3cret"), "export_table")

    assert "s3cret" not in error.get_safe_message()


def test_other_errors_keep_their_message():
    error = SamplerError(operation="x", message="relation missing", error_code=ErrorCode.QUERY_FAILED)

    assert error.get_safe_message() == "relation missing"


def test_retryable_codes():
    assert classify_error(QueryTimeout("slow"), "x").is_retryable is True
    assert classify_error(ConnectError("down"), "x").is_retryable is True
    assert classify_error(QueryError("bad"), "x").is_retryable is False
    assert classify_error(jinja2.TemplateSyntaxError("bad", 1), "x").is_retryable is False
