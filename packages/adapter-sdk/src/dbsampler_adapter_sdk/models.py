from __future__ import annotations

import dataclasses
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from .errors import QueryError

T = TypeVar("T")

DEFAULT_MAX_CHUNK_ROWS = 500


class ConnectionOptions(BaseModel):
    """Connection settings handed to ``DatabaseAdapter.connect``."""

    name: str = Field(default="default", description="Registry key for the connection.")
    url: Optional[str] = Field(default=None, description="Full database URL, takes precedence over parts.")
    driver: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    database: Optional[str] = None

    model_config = ConfigDict(extra="ignore", frozen=True)


class QueryOptions(BaseModel):
    """Per-invocation execution options."""

    timeout_ms: Optional[PositiveInt] = Field(
        default=None, description="Statement timeout in milliseconds; None disables it."
    )
    max_chunk_rows: PositiveInt = Field(
        default=DEFAULT_MAX_CHUNK_ROWS, description="Rows fetched per round-trip when streaming."
    )

    model_config = ConfigDict(extra="ignore", frozen=True)


class QueryResult(BaseModel):
    """Normalized, driver-agnostic result of a query."""

    columns: List[str]
    rows: List[List[Any]]
    row_count: int = Field(ge=0)
    execution_time_ms: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_shape(self) -> "QueryResult":
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names in result: {self.columns}")
        if self.row_count != len(self.rows):
            raise ValueError(f"row_count {self.row_count} does not match {len(self.rows)} rows")
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {index} has {len(row)} values, expected {width}")
        return self

    @classmethod
    def new(
        cls,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        execution_time_ms: Optional[float] = None,
    ) -> "QueryResult":
        """Creates a QueryResult from columns and rows, deriving ``row_count``."""
        row_values = [list(row) for row in rows]
        return cls(
            columns=list(columns),
            rows=row_values,
            row_count=len(row_values),
            execution_time_ms=execution_time_ms,
        )

    def to_row_dicts(self) -> List[Dict[str, Any]]:
        """Convert row values to list-of-dict rows using column order."""
        return [dict(zip(self.columns, row)) for row in self.rows]


@dataclasses.dataclass(frozen=True)
class ConnectionHandle:
    """Opaque reference to an established connection.

    Attributes:
        name: Registry key the handle was created under.
        adapter_id: Identifier of the adapter that owns ``resource``.
        resource: Backend object (engine, pool, ...); only the owning adapter looks inside.
    """

    name: str
    adapter_id: str
    resource: Any = dataclasses.field(default=None, repr=False, compare=False)


@dataclasses.dataclass(frozen=True)
class Outcome(Generic[T]):
    """Error-returning envelope: exactly one of ``value`` or ``error`` is meaningful."""

    value: Optional[T] = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Returns the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: QueryError) -> "Outcome[T]":
        return cls(error=error)
