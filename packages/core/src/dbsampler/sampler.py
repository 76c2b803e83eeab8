"""Table sampling and SQL export to NDJSON.

Two modes are supported:

- Table mode samples ``SELECT * FROM <table> [ORDER BY ...] LIMIT $1``.
- SQL mode runs SQL text, or a Jinja2 SQL template file, with positional
  ``$n`` parameters.

Each has an eager path (fetch everything, then write) and a streaming path
(write each row as its chunk arrives, inside one transaction).

Example:
    sampler = Sampler.from_settings(SamplerSettings())
    rows = sampler.sample_table("users", limit=100)
    count = sampler.export_table("users", "users.ndjson", limit=100)
    export = sampler.export_table_stream("events", "events.ndjson", limit=1_000_000)
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

from dbsampler_adapter_sdk import DEFAULT_MAX_CHUNK_ROWS, StreamCursor, TransactionHandle
from dbsampler.common.logger import export_context, get_logger
from dbsampler.common.settings import SamplerSettings
from dbsampler.database import Database, Row
from dbsampler.ndjson import NdjsonWriter, write_ndjson
from dbsampler.templating import SqlTemplateRenderer

logger = get_logger(__name__)

PathLike = Union[str, Path]

DEFAULT_LIMIT = 100
DEFAULT_TIMEOUT_MS = 60_000


class StreamExport(NamedTuple):
    """Result of a streaming export: the transaction committed and how many rows were written."""

    committed: bool
    row_count: int


def build_table_sql(table: str, order_by: Optional[str] = None) -> str:
    """Builds the table-mode query; the limit is always bound as ``$1``.

    ``table`` and ``order_by`` are interpolated as-is. They must come from a
    trusted operator.
    """
    if order_by:
        return f"SELECT * FROM {table} ORDER BY {order_by} LIMIT $1"
    return f"SELECT * FROM {table} LIMIT $1"


def _new_export_id() -> str:
    return uuid.uuid4().hex[:12]


class Sampler:
    """Samples tables and SQL queries and exports the rows as NDJSON.

    Errors from the database, the template renderer and the filesystem
    propagate unchanged.
    """

    def __init__(
        self,
        database: Database,
        *,
        default_limit: int = DEFAULT_LIMIT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_chunk_rows: int = DEFAULT_MAX_CHUNK_ROWS,
        renderer: Optional[SqlTemplateRenderer] = None,
    ):
        self.database = database
        self.default_limit = default_limit
        self.timeout_ms = timeout_ms
        self.max_chunk_rows = max_chunk_rows
        self.renderer = renderer or SqlTemplateRenderer()

    @classmethod
    def from_settings(cls, settings: SamplerSettings, database: Optional[Database] = None) -> "Sampler":
        return cls(
            database or Database.from_settings(settings),
            default_limit=settings.default_limit,
            timeout_ms=settings.timeout_ms,
            max_chunk_rows=settings.max_chunk_rows,
            renderer=SqlTemplateRenderer(settings.template_assigns()),
        )

    # ------------------------------------------------------------------
    # Table mode
    # ------------------------------------------------------------------

    def sample_table(
        self,
        table: str,
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Row]:
        sql = build_table_sql(table, order_by)
        return self.database.fetch_rows_or_raise(
            sql, [self._limit(limit)], timeout_ms=self._timeout(timeout_ms)
        )

    def export_table(
        self,
        table: str,
        output_path: PathLike,
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> int:
        """Samples ``table`` and writes the rows to ``output_path``. Returns the row count."""
        with export_context(_new_export_id()):
            logger.info(f"Exporting table {table} to {output_path}", extra={"mode": "eager"})
            rows = self.sample_table(table, limit=limit, order_by=order_by, timeout_ms=timeout_ms)
            return self._write(rows, output_path)

    def stream_table(
        self,
        tx: TransactionHandle,
        table: str,
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        max_chunk_rows: Optional[int] = None,
    ) -> StreamCursor:
        """Opens a cursor over a table sample. Must be consumed inside ``tx``.

        Example:
            with database.transaction_scope() as tx:
                for row in sampler.stream_table(tx, "users", limit=10_000):
                    process(row)
        """
        return self.stream_query(
            tx,
            build_table_sql(table, order_by),
            [self._limit(limit)],
            timeout_ms=timeout_ms,
            max_chunk_rows=max_chunk_rows,
        )

    def export_table_stream(
        self,
        table: str,
        output_path: PathLike,
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        max_chunk_rows: Optional[int] = None,
    ) -> StreamExport:
        """Streams a table sample straight to ``output_path`` without holding all rows in memory."""
        with export_context(_new_export_id()):
            logger.info(f"Streaming table {table} to {output_path}", extra={"mode": "stream"})
            return self._export_stream(
                output_path,
                lambda tx: self.stream_table(
                    tx,
                    table,
                    limit=limit,
                    order_by=order_by,
                    timeout_ms=timeout_ms,
                    max_chunk_rows=max_chunk_rows,
                ),
                timeout_ms,
            )

    # ------------------------------------------------------------------
    # SQL mode
    # ------------------------------------------------------------------

    def query(
        self, sql: str, params: Sequence[Any] = (), *, timeout_ms: Optional[int] = None
    ) -> List[Row]:
        return self.database.fetch_rows_or_raise(sql, params, timeout_ms=self._timeout(timeout_ms))

    def render_query_file(self, path: PathLike, assigns: Optional[Mapping[str, Any]] = None) -> str:
        """Reads and renders a SQL template file.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            jinja2.TemplateError: If the template cannot be rendered.
        """
        return self.renderer.render_file(path, assigns)

    def query_file(
        self,
        path: PathLike,
        *,
        params: Sequence[Any] = (),
        assigns: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Row]:
        sql = self.render_query_file(path, assigns)
        return self.query(sql, params, timeout_ms=timeout_ms)

    def export_query_file(
        self,
        sql_path: PathLike,
        output_path: PathLike,
        *,
        params: Sequence[Any] = (),
        assigns: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> int:
        with export_context(_new_export_id()):
            logger.info(f"Exporting query {sql_path} to {output_path}", extra={"mode": "eager"})
            rows = self.query_file(sql_path, params=params, assigns=assigns, timeout_ms=timeout_ms)
            return self._write(rows, output_path)

    def stream_query(
        self,
        tx: TransactionHandle,
        sql: str,
        params: Sequence[Any] = (),
        *,
        timeout_ms: Optional[int] = None,
        max_chunk_rows: Optional[int] = None,
    ) -> StreamCursor:
        return self.database.stream_rows(
            tx,
            sql,
            params,
            timeout_ms=self._timeout(timeout_ms),
            max_chunk_rows=max_chunk_rows or self.max_chunk_rows,
        )

    def export_query_file_stream(
        self,
        sql_path: PathLike,
        output_path: PathLike,
        *,
        params: Sequence[Any] = (),
        assigns: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
        max_chunk_rows: Optional[int] = None,
    ) -> StreamExport:
        with export_context(_new_export_id()):
            # Rendered before the transaction opens so template errors never touch the database.
            sql = self.render_query_file(sql_path, assigns)
            logger.info(f"Streaming query {sql_path} to {output_path}", extra={"mode": "stream"})
            return self._export_stream(
                output_path,
                lambda tx: self.stream_query(
                    tx, sql, params, timeout_ms=timeout_ms, max_chunk_rows=max_chunk_rows
                ),
                timeout_ms,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _export_stream(
        self,
        output_path: PathLike,
        open_cursor: Callable[[TransactionHandle], StreamCursor],
        timeout_ms: Optional[int],
    ) -> StreamExport:
        # Lines already flushed stay on disk if the transaction rolls back.
        def work(tx: TransactionHandle) -> int:
            with NdjsonWriter(output_path) as writer:
                cursor = open_cursor(tx)
                for row in cursor:
                    writer.write_row(row)
            logger.debug(f"Read {cursor.rows_read} rows in {cursor.chunks_read} chunks")
            return writer.count

        row_count = self.database.transaction(work, timeout_ms=self._timeout(timeout_ms))
        logger.info(f"Wrote {row_count} rows to {output_path}", extra={"row_count": row_count})
        return StreamExport(committed=True, row_count=row_count)

    def _write(self, rows: List[Dict[str, Any]], output_path: PathLike) -> int:
        row_count = write_ndjson(rows, output_path)
        logger.info(f"Wrote {row_count} rows to {output_path}", extra={"row_count": row_count})
        return row_count

    def _limit(self, limit: Optional[int]) -> int:
        return self.default_limit if limit is None else limit

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return timeout_ms or self.timeout_ms
