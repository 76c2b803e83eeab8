from abc import ABC, abstractmethod
from typing import Any, Callable, ContextManager, Optional, Sequence, TypeVar

from .cursor import StreamCursor, TransactionHandle
from .errors import QueryError
from .models import ConnectionHandle, ConnectionOptions, Outcome, QueryOptions, QueryResult

R = TypeVar("R")


class DatabaseAdapter(ABC):
    """Canonical interface every database backend must implement.

    Implementations translate their driver's results and failures into
    ``QueryResult`` and ``QueryError``; no driver exception type may escape.
    """

    #: Identifier used for discovery and stamped on handles.
    adapter_id: str = "abstract"

    def __str__(self):
        return f"{type(self).__name__} ({self.adapter_id})"

    @abstractmethod
    def connect(self, options: ConnectionOptions) -> ConnectionHandle:
        """Establish (or register) a connection. Raises ConnectError."""
        pass

    def disconnect(self, conn: ConnectionHandle) -> None:
        """Release long-lived resources held by ``conn``."""
        return None

    def execute(
        self,
        conn: ConnectionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> Outcome[QueryResult]:
        """Execute a query, returning failures as an Outcome instead of raising."""
        try:
            return Outcome.success(self.execute_or_raise(conn, sql, params, options))
        except QueryError as exc:
            return Outcome.failure(exc)

    @abstractmethod
    def execute_or_raise(
        self,
        conn: ConnectionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """Execute a query, loading the full result into memory. Raises QueryError."""
        pass

    @abstractmethod
    def transaction(
        self, conn: ConnectionHandle, options: Optional[QueryOptions] = None
    ) -> ContextManager[TransactionHandle]:
        """Context manager around one transaction.

        Commits on normal exit, rolls back and re-raises on any exception and
        releases the transaction resource on every exit path.
        """
        pass

    def transact(
        self,
        conn: ConnectionHandle,
        work: Callable[[TransactionHandle], R],
        options: Optional[QueryOptions] = None,
    ) -> R:
        """Run ``work`` with a transaction-scoped handle and return its result."""
        with self.transaction(conn, options) as tx:
            return work(tx)

    @abstractmethod
    def stream(
        self,
        tx: TransactionHandle,
        sql: str,
        params: Sequence[Any] = (),
        options: Optional[QueryOptions] = None,
    ) -> StreamCursor:
        """Open a chunked cursor; only valid while ``tx`` is active."""
        pass
