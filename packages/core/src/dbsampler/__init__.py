from .database import Database, rows_to_maps
from .encoding import dumps_row, encode_row, encode_value
from .ndjson import NdjsonWriter, write_ndjson
from .sampler import Sampler, StreamExport, build_table_sql
from .templating import SqlTemplateRenderer
from .common.settings import SamplerSettings

__all__ = [
    "Database",
    "Sampler",
    "StreamExport",
    "SamplerSettings",
    "SqlTemplateRenderer",
    "NdjsonWriter",
    "build_table_sql",
    "rows_to_maps",
    "encode_value",
    "encode_row",
    "dumps_row",
    "write_ndjson",
]
