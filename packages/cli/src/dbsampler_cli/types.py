from pydantic import BaseModel, Field, PositiveInt, model_validator
from typing import Any, Dict, List, Optional
import pathlib


class SampleConfig(BaseModel):
    """Configuration for one `dbsampler sample` run."""
    table: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=0)
    order_by: Optional[str] = None
    sql_path: Optional[pathlib.Path] = None
    assigns: Dict[str, Any] = Field(default_factory=dict)
    params: List[Any] = Field(default_factory=list)
    output: pathlib.Path = pathlib.Path("sample.ndjson")
    timeout_ms: Optional[PositiveInt] = None
    stream: bool = False
    max_chunk_rows: Optional[PositiveInt] = None

    @model_validator(mode="after")
    def _one_mode(self) -> "SampleConfig":
        if self.table and self.sql_path:
            raise ValueError("--table and --sql are mutually exclusive")
        return self

    @property
    def sql_mode(self) -> bool:
        return self.sql_path is not None
