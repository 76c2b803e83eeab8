import time
from abc import abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from dbsampler_adapter_sdk import (
    Chunk,
    ConnectError,
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

from .params import bind_positional

import logging
logger = logging.getLogger(__name__)

_DEFAULT_OPTIONS = QueryOptions()


class BaseSQLAlchemyAdapter(DatabaseAdapter):
    """
    Base class for all SQLAlchemy-based adapters.
    Implements common logic for connection, execution, transactions and streaming.

    Subclasses supply the engine-specific pieces: the default driver name,
    how a statement timeout is applied and how a timeout is recognized.
    """

    adapter_id = "sqlalchemy"
    default_driver: str = ""

    def __init__(self, pool_pre_ping: bool = True, **engine_kwargs: Any):
        self.pool_pre_ping = pool_pre_ping
        self.engine_kwargs = engine_kwargs

    # ------------------------------------------------------------------
    # Engine-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def apply_statement_timeout(self, conn: Connection, timeout_ms: Optional[int]) -> None:
        """Bound the next statement on ``conn`` by ``timeout_ms`` (None clears it)."""
        pass

    def refresh_statement_timeout(self, conn: Connection, timeout_ms: Optional[int]) -> None:
        """Called before each chunk fetch of a stream.

        Backends whose timeout already covers each fetch separately keep this
        no-op; those with one deadline per cursor restart it here.
        """
        return None

    def is_timeout(self, error: DBAPIError) -> bool:
        """Whether the driver error means the statement exceeded its timeout."""
        return False

    def configure_engine(self, engine: Engine) -> None:
        """Called once per new engine, before the connect ping."""
        return None

    def error_code(self, error: DBAPIError) -> Optional[str]:
        orig = error.orig
        return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)

    def build_url(self, options: ConnectionOptions) -> URL:
        if options.url:
            return make_url(options.url)
        return URL.create(
            drivername=options.driver or self.default_driver,
            username=options.username,
            password=options.password,
            host=options.host,
            port=options.port,
            database=options.database,
        )

    # ------------------------------------------------------------------
    # DatabaseAdapter
    # ------------------------------------------------------------------

    def connect(self, options: ConnectionOptions) -> ConnectionHandle:
        try:
            url = self.build_url(options)
            engine = create_engine(url, pool_pre_ping=self.pool_pre_ping, **self.engine_kwargs)
            self.configure_engine(engine)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Failed to connect {self} '{options.name}': {e}")
            raise ConnectError(f"Could not connect to database '{options.name}'", cause=e) from e

        logger.debug(f"Connected {self} '{options.name}' to {url.render_as_string(hide_password=True)}")
        return ConnectionHandle(name=options.name, adapter_id=self.adapter_id, resource=engine)

    def disconnect(self, conn: ConnectionHandle) -> None:
        self._engine(conn).dispose()

    def execute_or_raise(
        self,
        conn: ConnectionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        options = options or _DEFAULT_OPTIONS
        statement, binds = bind_positional(sql, params)
        engine = self._engine(conn)

        start = time.perf_counter()
        try:
            with engine.connect() as connection, connection.begin():
                self.apply_statement_timeout(connection, options.timeout_ms)
                result = connection.execute(statement, binds)
                if result.returns_rows:
                    cols = list(result.keys())
                    rows = [list(row) for row in result.fetchall()]
                else:
                    cols, rows = [], []
        except SQLAlchemyError as e:
            raise self._wrap(e) from e

        duration = time.perf_counter() - start
        return QueryResult.new(cols, rows, execution_time_ms=duration * 1000)

    @contextmanager
    def transaction(
        self, conn: ConnectionHandle, options: Optional[QueryOptions] = None
    ) -> Iterator[TransactionHandle]:
        options = options or _DEFAULT_OPTIONS
        engine = self._engine(conn)
        try:
            connection = engine.connect()
            trans = connection.begin()
        except SQLAlchemyError as e:
            raise self._wrap(e) from e

        tx = TransactionHandle(self.adapter_id, connection, timeout_ms=options.timeout_ms)
        try:
            yield tx
        except BaseException:
            # Cursors must be closed before the server-side transaction ends.
            tx.release()
            try:
                trans.rollback()
            except SQLAlchemyError as e:
                logger.error(f"Rollback failed on {self}: {e}")
            raise
        else:
            tx.release()
            try:
                trans.commit()
            except SQLAlchemyError as e:
                raise self._wrap(e) from e
        finally:
            tx.release()
            connection.close()

    def stream(
        self,
        tx: TransactionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> StreamCursor:
        tx.ensure_active()
        options = options or QueryOptions(timeout_ms=tx.timeout_ms)
        statement, binds = bind_positional(sql, params)
        return StreamCursor(tx, self._chunks(tx.connection, statement, binds, options))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _chunks(self, connection: Connection, statement, binds, options: QueryOptions) -> Iterator[Chunk]:
        result = None
        try:
            self.apply_statement_timeout(connection, options.timeout_ms)
            result = connection.execute(
                statement, binds, execution_options={"yield_per": options.max_chunk_rows}
            )
            cols = list(result.keys())
            partitions = result.partitions()
            while True:
                self.refresh_statement_timeout(connection, options.timeout_ms)
                partition = next(partitions, None)
                if partition is None:
                    break
                yield cols, partition
        except SQLAlchemyError as e:
            raise self._wrap(e) from e
        finally:
            if result is not None:
                result.close()

    def _engine(self, conn: ConnectionHandle) -> Engine:
        if not isinstance(conn.resource, Engine):
            raise QueryError(f"Connection '{conn.name}' is not connected to {self}")
        return conn.resource

    def _wrap(self, error: SQLAlchemyError) -> QueryError:
        if isinstance(error, DBAPIError):
            message = str(error.orig) if error.orig is not None else str(error)
            code = self.error_code(error)
            if self.is_timeout(error):
                logger.error(f"Statement timeout on {self}: {message}")
                return QueryTimeout(message, code=code, cause=error)
            if error.connection_invalidated:
                return ConnectError(message, code=code, cause=error)
            return QueryError(message, code=code, cause=error)
        return QueryError(str(error), cause=error)
