import re
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, List, Optional, Sequence

from dbsampler_adapter_sdk import (
    Chunk,
    ConnectionHandle,
    ConnectionOptions,
    DatabaseAdapter,
    QueryError,
    QueryOptions,
    QueryResult,
    QueryTimeout,
    StreamCursor,
    TransactionHandle,
)

COLUMNS = ["id", "name", "email", "active", "created_at", "updated_at"]
DEFAULT_ROW_LIMIT = 10

_LIMIT_CLAUSE = re.compile(r"LIMIT\s+(\d+)", re.IGNORECASE)

_DEFAULT_OPTIONS = QueryOptions()


def resolve_row_limit(sql: str, params: Sequence[Any]) -> int:
    """
    Decides how many synthetic rows a query produces.

    The first positional parameter wins; otherwise a literal ``LIMIT n`` in the
    SQL text; otherwise ``DEFAULT_ROW_LIMIT``.
    """
    if params:
        try:
            limit = int(params[0])
        except (TypeError, ValueError) as exc:
            raise QueryError(f"Expected an integer row limit as $1, got {params[0]!r}", cause=exc) from exc
        if limit < 0:
            raise QueryError(f"Row limit must be non-negative, got {limit}")
        return limit

    match = _LIMIT_CLAUSE.search(sql)
    if match:
        return int(match.group(1))
    return DEFAULT_ROW_LIMIT


def build_sample_row(index: int, now: datetime) -> List[Any]:
    created_at = now - timedelta(days=index)
    return [
        str(uuid.uuid4()),
        f"User {index}",
        f"user{index}@example.com",
        index % 3 != 0,
        created_at,
        created_at,
    ]


class MockAdapter(DatabaseAdapter):
    """
    In-process adapter that synthesizes user rows without any network I/O.

    Every operation bumps a public counter so tests can assert how the
    pipeline drove the adapter.

    Args:
        latency_ms: Simulated execution time; a query whose timeout is lower
            fails with QueryTimeout. Nothing actually sleeps.
        fail_pattern: Regex; matching SQL fails with a backend-style QueryError.
    """

    adapter_id = "mock"

    def __init__(self, latency_ms: int = 0, fail_pattern: Optional[str] = None):
        self.latency_ms = latency_ms
        self.fail_pattern = re.compile(fail_pattern, re.IGNORECASE) if fail_pattern else None
        self.connects = 0
        self.disconnects = 0
        self.queries = 0
        self.transactions_opened = 0
        self.transactions_released = 0
        self.commits = 0
        self.rollbacks = 0
        self.chunks_fetched = 0

    def connect(self, options: ConnectionOptions) -> ConnectionHandle:
        self.connects += 1
        return ConnectionHandle(name=options.name, adapter_id=self.adapter_id)

    def disconnect(self, conn: ConnectionHandle) -> None:
        self.disconnects += 1

    def execute_or_raise(
        self,
        conn: ConnectionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        self._run_checks(sql, options or _DEFAULT_OPTIONS)
        limit = resolve_row_limit(sql, params)
        now = datetime.now(timezone.utc)
        rows = [build_sample_row(index, now) for index in range(1, limit + 1)]
        return QueryResult.new(COLUMNS, rows, execution_time_ms=float(self.latency_ms))

    @contextmanager
    def transaction(
        self, conn: ConnectionHandle, options: Optional[QueryOptions] = None
    ) -> Iterator[TransactionHandle]:
        options = options or _DEFAULT_OPTIONS
        self.transactions_opened += 1
        # No real isolation: the handle has no backing connection.
        tx = TransactionHandle(self.adapter_id, None, timeout_ms=options.timeout_ms)
        try:
            yield tx
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            if tx.release():
                self.transactions_released += 1

    def stream(
        self,
        tx: TransactionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> StreamCursor:
        tx.ensure_active()
        options = options or QueryOptions(timeout_ms=tx.timeout_ms)
        self._run_checks(sql, options)
        limit = resolve_row_limit(sql, params)
        return StreamCursor(tx, self._chunks(limit, options.max_chunk_rows))

    def _chunks(self, limit: int, chunk_size: int) -> Iterator[Chunk]:
        now = datetime.now(timezone.utc)
        for start in range(1, limit + 1, chunk_size):
            stop = min(start + chunk_size, limit + 1)
            self.chunks_fetched += 1
            yield COLUMNS, [build_sample_row(index, now) for index in range(start, stop)]

    def _run_checks(self, sql: str, options: QueryOptions) -> None:
        self.queries += 1
        if self.fail_pattern and self.fail_pattern.search(sql):
            raise QueryError(f"Simulated failure for query: {sql.strip()}", code="XX000")
        if options.timeout_ms is not None and self.latency_ms > options.timeout_ms:
            raise QueryTimeout(
                f"canceling statement due to statement timeout ({self.latency_ms}ms > {options.timeout_ms}ms)",
                code="57014",
            )
