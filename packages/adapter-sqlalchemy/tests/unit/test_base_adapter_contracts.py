from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError

from dbsampler_adapter_sdk import (
    ConnectError,
    ConnectionHandle,
    ConnectionOptions,
    ParameterMismatchError,
    QueryError,
    QueryTimeout,
)
from dbsampler_sqlalchemy_adapter import BaseSQLAlchemyAdapter


class _TestAdapter(BaseSQLAlchemyAdapter):
    adapter_id = "test"
    default_driver = "sqlite"

    def apply_statement_timeout(self, conn, timeout_ms):
        pass

    def is_timeout(self, error):
        return "canceling statement" in str(error.orig)


class _DriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def test_build_url_prefers_full_url():
    adapter = _TestAdapter()

    url = adapter.build_url(ConnectionOptions(url="sqlite:///app.db", host="ignored"))

    assert url.drivername == "sqlite"
    assert url.database == "app.db"


def test_build_url_from_parts_uses_default_driver():
    adapter = _TestAdapter()

    url = adapter.build_url(ConnectionOptions(database="app.db"))

    assert url.drivername == "sqlite"
    assert url.database == "app.db"


def test_connect_failure_raises_connect_error(monkeypatch):
    # Arrange
    engine = MagicMock()
    engine.connect.side_effect = OperationalError("SELECT 1", {}, _DriverError("connection refused"))
    monkeypatch.setattr("dbsampler_sqlalchemy_adapter.adapter.create_engine", lambda *a, **k: engine)
    adapter = _TestAdapter()

    # Act / Assert
    with pytest.raises(ConnectError) as exc_info:
        adapter.connect(ConnectionOptions(name="warehouse", url="sqlite://"))
    assert "warehouse" in str(exc_info.value)
    assert isinstance(exc_info.value.cause, OperationalError)


def test_wrap_maps_driver_errors_with_code():
    adapter = _TestAdapter()
    error = ProgrammingError("SELECT", {}, _DriverError('relation "x" does not exist', pgcode="42P01"))

    wrapped = adapter._wrap(error)

    assert type(wrapped) is QueryError
    assert wrapped.code == "42P01"
    assert wrapped.message == 'relation "x" does not exist'
    assert wrapped.cause is error


def test_wrap_detects_timeouts():
    adapter = _TestAdapter()
    error = OperationalError("SELECT", {}, _DriverError("canceling statement due to statement timeout", pgcode="57014"))

    wrapped = adapter._wrap(error)

    assert isinstance(wrapped, QueryTimeout)
    assert wrapped.code == "57014"


def test_wrap_marks_invalidated_connections():
    adapter = _TestAdapter()
    error = DBAPIError("SELECT", {}, _DriverError("server closed the connection"), connection_invalidated=True)

    assert isinstance(adapter._wrap(error), ConnectError)


def test_execute_rejects_foreign_handles():
    adapter = _TestAdapter()
    handle = ConnectionHandle("default", "mock", resource=None)

    outcome = adapter.execute(handle, "SELECT 1")

    assert outcome.ok is False
    assert "not connected" in outcome.error.message


def test_parameter_mismatch_fails_before_touching_engine():
    # Arrange
    engine = MagicMock()
    adapter = _TestAdapter()
    handle = ConnectionHandle("default", "test", resource=engine)

    # Act / Assert
    with pytest.raises(ParameterMismatchError):
        adapter.execute_or_raise(handle, "SELECT * FROM t WHERE a = $1 AND b = $2", [1])
    engine.connect.assert_not_called()
