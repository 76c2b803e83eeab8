from .errors import (
    QueryError,
    ConnectError,
    QueryTimeout,
    ParameterMismatchError,
    CursorClosedError,
)
from .models import (
    ConnectionOptions,
    ConnectionHandle,
    QueryOptions,
    QueryResult,
    Outcome,
    DEFAULT_MAX_CHUNK_ROWS,
)
from .cursor import StreamCursor, TransactionHandle, Chunk
from .interfaces import DatabaseAdapter

__all__ = [
    "DatabaseAdapter",
    "ConnectionOptions",
    "ConnectionHandle",
    "QueryOptions",
    "QueryResult",
    "Outcome",
    "StreamCursor",
    "TransactionHandle",
    "Chunk",
    "QueryError",
    "ConnectError",
    "QueryTimeout",
    "ParameterMismatchError",
    "CursorClosedError",
    "DEFAULT_MAX_CHUNK_ROWS",
]
