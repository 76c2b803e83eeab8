import time
from typing import Optional

from sqlalchemy import Connection, Engine, event
from sqlalchemy.exc import DBAPIError

from dbsampler_sqlalchemy_adapter import BaseSQLAlchemyAdapter

# VM instructions between deadline checks.
_PROGRESS_INTERVAL = 1000


def _clear_progress_handler(dbapi_connection, connection_record) -> None:
    if dbapi_connection is not None:
        dbapi_connection.set_progress_handler(None, 0)


class SqliteAdapter(BaseSQLAlchemyAdapter):
    """SQLite backend; timeouts are enforced with a progress-handler deadline."""

    adapter_id = "sqlite"
    default_driver = "sqlite"

    def configure_engine(self, engine: Engine) -> None:
        # A stale deadline would interrupt the next checkout's pre-ping.
        event.listen(engine, "checkin", _clear_progress_handler)

    def apply_statement_timeout(self, conn: Connection, timeout_ms: Optional[int]) -> None:
        dbapi_conn = conn.connection.dbapi_connection
        if not timeout_ms:
            dbapi_conn.set_progress_handler(None, 0)
            return

        deadline = time.monotonic() + timeout_ms / 1000

        def _past_deadline() -> int:
            return 1 if time.monotonic() > deadline else 0

        dbapi_conn.set_progress_handler(_past_deadline, _PROGRESS_INTERVAL)

    def refresh_statement_timeout(self, conn: Connection, timeout_ms: Optional[int]) -> None:
        # The deadline covers one fetch, not the time a consumer spends between chunks.
        self.apply_statement_timeout(conn, timeout_ms)

    def is_timeout(self, error: DBAPIError) -> bool:
        return "interrupted" in str(error.orig).lower()
