from __future__ import annotations

from typing import Any, Callable, ContextManager, Dict, List, Optional, Sequence, TypeVar

from dbsampler_adapter_sdk import (
    DEFAULT_MAX_CHUNK_ROWS,
    ConnectionHandle,
    ConnectionOptions,
    DatabaseAdapter,
    Outcome,
    QueryError,
    QueryOptions,
    QueryResult,
    StreamCursor,
    TransactionHandle,
)
from dbsampler.common.logger import get_logger
from dbsampler.common.settings import SamplerSettings
from dbsampler.datasources.discovery import load_adapter
from dbsampler.datasources.registry import ConnectionRegistry

logger = get_logger(__name__)

R = TypeVar("R")
Row = Dict[str, Any]

DEFAULT_QUERY_TIMEOUT_MS = 15_000


def rows_to_maps(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> List[Row]:
    """Zips ``columns`` with each row tuple, preserving column order."""
    return [dict(zip(columns, row)) for row in rows]


class Database:
    """
    Query façade over one configured adapter.

    Resolves named connections through a ``ConnectionRegistry`` and injects the
    default timeout whenever a call does not pass one. Each operation comes in
    an error-returning form (``Outcome``) and a raising form (``*_or_raise``).
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        registry: Optional[ConnectionRegistry] = None,
        *,
        default_timeout_ms: int = DEFAULT_QUERY_TIMEOUT_MS,
        default_connection: str = "default",
        max_chunk_rows: int = DEFAULT_MAX_CHUNK_ROWS,
    ):
        self.adapter = adapter
        self.registry = registry or ConnectionRegistry(
            adapter, {default_connection: ConnectionOptions(name=default_connection)}
        )
        self.default_timeout_ms = default_timeout_ms
        self.default_connection = default_connection
        self.max_chunk_rows = max_chunk_rows

    @classmethod
    def from_settings(
        cls, settings: SamplerSettings, adapter: Optional[DatabaseAdapter] = None
    ) -> "Database":
        """Builds the façade from settings, discovering the adapter unless one is given."""
        adapter = adapter or load_adapter(settings.database_adapter)
        registry = ConnectionRegistry(adapter, {"default": settings.connection_options()})
        return cls(
            adapter,
            registry,
            default_timeout_ms=settings.query_timeout_ms,
            max_chunk_rows=settings.max_chunk_rows,
        )

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connection(self, name: Optional[str] = None) -> ConnectionHandle:
        return self.registry.get(name or self.default_connection)

    def options(
        self, timeout_ms: Optional[int] = None, max_chunk_rows: Optional[int] = None
    ) -> QueryOptions:
        return QueryOptions(
            timeout_ms=timeout_ms or self.default_timeout_ms,
            max_chunk_rows=max_chunk_rows or self.max_chunk_rows,
        )

    # ------------------------------------------------------------------
    # Error-returning
    # ------------------------------------------------------------------

    def query(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        conn: Optional[str] = None,
    ) -> Outcome[QueryResult]:
        try:
            handle = self.connection(conn)
        except QueryError as e:
            return Outcome.failure(e)
        except ValueError as e:
            # Unknown connection name.
            return Outcome.failure(QueryError(str(e), cause=e))

        outcome = self.adapter.execute(handle, sql, list(params), self.options(timeout_ms))
        if not outcome.ok:
            logger.debug(f"Query failed on '{handle.name}': {outcome.error}")
        return outcome

    def fetch_rows(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        conn: Optional[str] = None,
    ) -> Outcome[List[Row]]:
        outcome = self.query(sql, params, timeout_ms=timeout_ms, conn=conn)
        if not outcome.ok:
            return Outcome.failure(outcome.error)
        return Outcome.success(rows_to_maps(outcome.value.columns, outcome.value.rows))

    # ------------------------------------------------------------------
    # Raising
    # ------------------------------------------------------------------

    def query_or_raise(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        conn: Optional[str] = None,
    ) -> QueryResult:
        handle = self.connection(conn)
        return self.adapter.execute_or_raise(handle, sql, list(params), self.options(timeout_ms))

    def fetch_rows_or_raise(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        conn: Optional[str] = None,
    ) -> List[Row]:
        result = self.query_or_raise(sql, params, timeout_ms=timeout_ms, conn=conn)
        return rows_to_maps(result.columns, result.rows)

    # ------------------------------------------------------------------
    # Transactions and streaming
    # ------------------------------------------------------------------

    def transaction(
        self,
        work: Callable[[TransactionHandle], R],
        *,
        timeout_ms: Optional[int] = None,
        conn: Optional[str] = None,
    ) -> R:
        """Runs ``work`` inside one transaction; commits on return, rolls back on raise."""
        return self.adapter.transact(self.connection(conn), work, self.options(timeout_ms))

    def transaction_scope(
        self, *, timeout_ms: Optional[int] = None, conn: Optional[str] = None
    ) -> ContextManager[TransactionHandle]:
        return self.adapter.transaction(self.connection(conn), self.options(timeout_ms))

    def stream_rows(
        self,
        tx: TransactionHandle,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        max_chunk_rows: Optional[int] = None,
    ) -> StreamCursor:
        """Opens a chunked cursor; it must be consumed before ``tx`` ends."""
        options = self.options(timeout_ms or tx.timeout_ms, max_chunk_rows)
        return self.adapter.stream(tx, sql, list(params), options)

    def close(self) -> None:
        self.registry.close_all()
