from typing import Optional


class QueryError(Exception):
    """Normalized database error.

    Wraps underlying driver errors so callers above the adapter boundary never
    see a backend-specific exception type.

    Attributes:
        message: Human-readable error message.
        code: Backend error code (e.g. a PostgreSQL SQLSTATE), if any.
        cause: The original exception raised by the driver, if any.
    """

    def __init__(self, message: str, code: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (code: {self.code})"
        return self.message

    @classmethod
    def wrap(cls, error: BaseException) -> "QueryError":
        """Creates a QueryError from any exception, returning QueryErrors unchanged."""
        if isinstance(error, QueryError):
            return error
        return cls(str(error) or type(error).__name__, code=None, cause=error)


class ConnectError(QueryError):
    """A connection to the database could not be established."""


class QueryTimeout(QueryError):
    """Statement execution exceeded its timeout."""


class ParameterMismatchError(QueryError):
    """The number of positional parameters does not match the SQL placeholders."""


class CursorClosedError(QueryError):
    """A stream cursor was used outside the lifetime of its transaction."""
