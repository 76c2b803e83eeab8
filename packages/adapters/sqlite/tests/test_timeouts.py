import time

import pytest

from dbsampler_adapter_sdk import ConnectionOptions, QueryOptions, QueryTimeout
from dbsampler_sqlite.adapter import SqliteAdapter

# Counts far enough that it cannot finish inside the timeouts below.
SLOW_SQL = (
    "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 1000000000) "
    "SELECT COUNT(*) FROM c"
)


@pytest.fixture
def adapter():
    return SqliteAdapter()


@pytest.fixture
def handle(adapter, tmp_path):
    handle = adapter.connect(ConnectionOptions(url=f"sqlite:///{tmp_path / 'timeouts.db'}"))
    yield handle
    adapter.disconnect(handle)


def test_slow_query_times_out(adapter, handle):
    # Act
    outcome = adapter.execute(handle, SLOW_SQL, (), QueryOptions(timeout_ms=50))

    # Assert
    assert isinstance(outcome.error, QueryTimeout)


def test_connection_is_usable_after_timeout(adapter, handle):
    adapter.execute(handle, SLOW_SQL, (), QueryOptions(timeout_ms=50))

    result = adapter.execute_or_raise(handle, "SELECT $1 AS answer", [42])

    assert result.rows == [[42]]


def test_stream_timeout_propagates_from_transaction(adapter, handle):
    # Arrange
    def work(tx):
        return list(adapter.stream(tx, SLOW_SQL, (), QueryOptions(timeout_ms=50)))

    # Act / Assert
    with pytest.raises(QueryTimeout):
        adapter.transact(handle, work)


def test_slow_consumer_does_not_exhaust_stream_timeout(adapter, handle):
    # Arrange
    sql = "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 3000) SELECT x FROM c"

    def work(tx):
        rows = 0
        for _ in adapter.stream(tx, sql, (), QueryOptions(timeout_ms=200, max_chunk_rows=500)):
            rows += 1
            if rows % 500 == 0:
                time.sleep(0.1)
        return rows

    # Act
    rows = adapter.transact(handle, work)

    # Assert
    assert rows == 3000


def test_fast_query_within_timeout(adapter, handle):
    result = adapter.execute_or_raise(handle, "SELECT 1 AS one", (), QueryOptions(timeout_ms=5000))

    assert result.rows == [[1]]
