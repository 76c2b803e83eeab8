from typing import Optional

from sqlalchemy import Connection, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError

from dbsampler_adapter_sdk import ConnectionOptions
from dbsampler_sqlalchemy_adapter import BaseSQLAlchemyAdapter

# SQLSTATE raised when statement_timeout cancels a query.
QUERY_CANCELED = "57014"


class PostgresAdapter(BaseSQLAlchemyAdapter):
    adapter_id = "postgres"
    default_driver = "postgresql+psycopg2"

    def build_url(self, options: ConnectionOptions) -> URL:
        url = super().build_url(options)
        # Heroku/libpq style URLs carry no driver.
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername=self.default_driver)
        return url

    def apply_statement_timeout(self, conn: Connection, timeout_ms: Optional[int]) -> None:
        # is_local=true scopes the setting to the current transaction.
        conn.execute(
            text("SELECT set_config('statement_timeout', :timeout, true)"),
            {"timeout": str(timeout_ms or 0)},
        )

    def is_timeout(self, error: DBAPIError) -> bool:
        return self.error_code(error) == QUERY_CANCELED
