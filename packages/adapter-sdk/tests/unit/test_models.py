import pytest
from pydantic import ValidationError

from dbsampler_adapter_sdk import (
    ConnectionHandle,
    ConnectionOptions,
    Outcome,
    QueryError,
    QueryOptions,
    QueryResult,
)


def test_query_result_new_derives_row_count():
    # Act
    result = QueryResult.new(["id", "name"], [(1, "a"), (2, "b")], execution_time_ms=1.5)

    # Assert
    assert result.row_count == 2
    assert result.rows == [[1, "a"], [2, "b"]]
    assert result.to_row_dicts() == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]


def test_query_result_rejects_row_count_mismatch():
    with pytest.raises(ValidationError, match="row_count"):
        QueryResult(columns=["id"], rows=[[1]], row_count=2)


def test_query_result_rejects_wrong_arity():
    with pytest.raises(ValidationError, match="expected 2"):
        QueryResult.new(["id", "name"], [[1]])


def test_query_result_rejects_duplicate_columns():
    with pytest.raises(ValidationError, match="Duplicate"):
        QueryResult.new(["id", "id"], [])


def test_query_result_is_immutable():
    result = QueryResult.new(["id"], [[1]])

    with pytest.raises(ValidationError):
        result.row_count = 5


def test_row_dicts_follow_column_order():
    result = QueryResult.new(["z", "a", "m"], [[1, 2, 3]])

    assert list(result.to_row_dicts()[0].keys()) == ["z", "a", "m"]


def test_query_options_defaults_and_validation():
    # Act
    options = QueryOptions()

    # Assert
    assert options.timeout_ms is None
    assert options.max_chunk_rows == 500
    with pytest.raises(ValidationError):
        QueryOptions(max_chunk_rows=0)
    with pytest.raises(ValidationError):
        QueryOptions(timeout_ms=-1)


def test_connection_options_hides_password():
    options = ConnectionOptions(host="db", username="app", password="s3cret")

    assert "s3cret" not in repr(options)
    assert options.name == "default"


def test_connection_handle_compares_without_resource():
    assert ConnectionHandle("default", "mock", object()) == ConnectionHandle("default", "mock", object())


def test_outcome_success_and_failure():
    # Arrange
    error = QueryError("relation does not exist", code="42P01")

    # Act
    ok = Outcome.success(42)
    failed = Outcome.failure(error)

    # Assert
    assert ok.ok and ok.unwrap() == 42
    assert not failed.ok
    with pytest.raises(QueryError) as exc_info:
        failed.unwrap()
    assert exc_info.value is error
