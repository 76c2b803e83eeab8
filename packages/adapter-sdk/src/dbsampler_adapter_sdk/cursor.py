from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import CursorClosedError, QueryError

# One round-trip worth of rows: (columns, rows).
Chunk = Tuple[Sequence[str], Sequence[Sequence[Any]]]

_EXHAUSTED = object()


class TransactionHandle:
    """Transaction-scoped handle passed to the work inside ``DatabaseAdapter.transaction``.

    The adapter creates the handle on entry and calls ``release`` on every exit
    path. Cursors opened against the handle are closed on release, so any later
    attempt to advance them fails.
    """

    def __init__(self, adapter_id: str, connection: Any = None, timeout_ms: Optional[int] = None):
        self.adapter_id = adapter_id
        self.connection = connection
        self.timeout_ms = timeout_ms
        self.active = True
        self._cursors: List["StreamCursor"] = []

    def __repr__(self) -> str:
        state = "active" if self.active else "released"
        return f"<TransactionHandle {self.adapter_id} {state}>"

    def ensure_active(self) -> None:
        if not self.active:
            raise CursorClosedError(
                f"Transaction on '{self.adapter_id}' has already ended; "
                "streams must be consumed inside their transaction"
            )

    def register(self, cursor: "StreamCursor") -> None:
        self.ensure_active()
        self._cursors.append(cursor)

    def release(self) -> bool:
        """Marks the transaction as ended and closes its cursors.

        Returns:
            bool: True if this call released the handle, False if it was already released.
        """
        if not self.active:
            return False
        self.active = False
        cursors, self._cursors = self._cursors, []
        for cursor in cursors:
            cursor.close()
        return True


class StreamCursor(Iterator[Dict[str, Any]]):
    """Lazy, finite, non-restartable sequence of rows bound to one transaction.

    Rows are pulled chunk by chunk from ``chunks`` and yielded as field maps
    in arrival order. Re-reading requires issuing the query again.
    """

    def __init__(self, transaction: TransactionHandle, chunks: Iterable[Chunk]):
        self._transaction = transaction
        self._chunks = iter(chunks)
        self._columns: Optional[List[str]] = None
        self._pending: Iterator[Sequence[Any]] = iter(())
        self._exhausted = False
        self._closed = False
        self.rows_read = 0
        self.chunks_read = 0
        transaction.register(self)

    @property
    def columns(self) -> Optional[List[str]]:
        """Column names, known once the first chunk has arrived."""
        return self._columns

    def __iter__(self) -> "StreamCursor":
        return self

    def __next__(self) -> Dict[str, Any]:
        self._transaction.ensure_active()
        if self._closed:
            raise CursorClosedError("Stream cursor has been closed")
        if self._exhausted:
            raise StopIteration

        while True:
            row = next(self._pending, _EXHAUSTED)
            if row is not _EXHAUSTED:
                self.rows_read += 1
                return dict(zip(self._columns, row))

            chunk = self._next_chunk()
            if chunk is None:
                self._exhausted = True
                raise StopIteration

            columns, rows = chunk
            self._columns = list(columns)
            self._pending = iter(rows)
            self.chunks_read += 1

    def _next_chunk(self) -> Optional[Chunk]:
        try:
            return next(self._chunks, None)
        except QueryError:
            raise
        except Exception as exc:
            raise QueryError.wrap(exc) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._chunks, "close", None)
        if close is not None:
            close()
