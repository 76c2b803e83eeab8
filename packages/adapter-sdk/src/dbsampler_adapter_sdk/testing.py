"""
Standard Compliance Test Suite for dbsampler adapters.
Any new adapter MUST pass these tests to be certified.
"""
import pytest

from dbsampler_adapter_sdk import (
    ConnectionHandle,
    CursorClosedError,
    DatabaseAdapter,
    QueryError,
    QueryOptions,
    QueryResult,
    TransactionHandle,
)


class AdapterComplianceSuite:
    @pytest.fixture
    def adapter(self) -> DatabaseAdapter:
        """Override this fixture in subclass to return the adapter under test."""
        raise NotImplementedError

    @pytest.fixture
    def connection(self, adapter) -> ConnectionHandle:
        """Override this fixture in subclass to return a connected handle."""
        raise NotImplementedError

    @pytest.fixture
    def sample_query(self):
        """(sql, params, expected_row_count) that succeeds against the adapter."""
        return "SELECT * FROM users LIMIT $1", [3], 3

    @pytest.fixture
    def failing_sql(self) -> str:
        return "SELECT * FROM dbsampler_missing_table_xyz"

    def test_execute_or_raise_contract(self, adapter, connection, sample_query):
        sql, params, expected = sample_query
        result = adapter.execute_or_raise(connection, sql, params, QueryOptions(timeout_ms=5000))
        assert isinstance(result, QueryResult)
        assert result.row_count == expected
        assert all(len(row) == len(result.columns) for row in result.rows)

    def test_execute_returns_error_value(self, adapter, connection, failing_sql):
        outcome = adapter.execute(connection, failing_sql)
        assert outcome.ok is False
        assert isinstance(outcome.error, QueryError)

    def test_execute_or_raise_normalizes_errors(self, adapter, connection, failing_sql):
        with pytest.raises(QueryError):
            adapter.execute_or_raise(connection, failing_sql)

    def test_transact_returns_work_result(self, adapter, connection):
        seen = []

        def work(tx):
            assert isinstance(tx, TransactionHandle)
            assert tx.active is True
            seen.append(tx)
            return "done"

        assert adapter.transact(connection, work) == "done"
        assert seen[0].active is False

    def test_transaction_reraises_work_failure(self, adapter, connection):
        seen = []

        def work(tx):
            seen.append(tx)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            adapter.transact(connection, work)
        assert seen[0].active is False

    def test_stream_yields_rows_in_chunks(self, adapter, connection, sample_query):
        sql, params, expected = sample_query

        def work(tx):
            cursor = adapter.stream(tx, sql, params, QueryOptions(max_chunk_rows=1))
            rows = list(cursor)
            return rows, cursor.chunks_read

        rows, chunks = adapter.transact(connection, work)
        assert len(rows) == expected
        assert chunks == expected
        assert all(isinstance(row, dict) and row for row in rows)

    def test_stream_cannot_outlive_transaction(self, adapter, connection, sample_query):
        sql, params, _ = sample_query
        cursor = adapter.transact(connection, lambda tx: adapter.stream(tx, sql, params))

        with pytest.raises(CursorClosedError):
            next(cursor)

    def test_stream_rejects_released_transaction(self, adapter, connection, sample_query):
        sql, params, _ = sample_query
        tx = adapter.transact(connection, lambda tx: tx)

        with pytest.raises(CursorClosedError):
            adapter.stream(tx, sql, params)
