from typing import Any, Dict, List, Union

from dbsampler import Sampler
from dbsampler_cli.console import print_step, print_success
from dbsampler_cli.types import SampleConfig


def parse_value(value: str) -> Union[bool, int, str]:
    """Coerces a command-line value: true/false, integers, otherwise the raw string."""
    if value == "true":
        return True
    if value == "false":
        return False
    try:
        return int(value)
    except ValueError:
        return value


def parse_vars(var_strings: List[str]) -> Dict[str, Any]:
    assigns = {}
    for var_string in var_strings:
        key, sep, value = var_string.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid --var format: {var_string}. Expected key=value")
        assigns[key] = parse_value(value)
    return assigns


def run_sample(config: SampleConfig, sampler: Sampler) -> int:
    """Runs one export described by ``config``; returns the number of rows written."""
    if config.sql_mode:
        row_count = _run_sql_mode(config, sampler)
    else:
        row_count = _run_table_mode(config, sampler)
    print_success(f"Wrote {row_count} rows to {config.output}")
    return row_count


def _run_table_mode(config: SampleConfig, sampler: Sampler) -> int:
    limit = sampler.default_limit if config.limit is None else config.limit
    print_step(f"Sampling {limit} rows from {config.table}...")
    if config.stream:
        return sampler.export_table_stream(
            config.table,
            config.output,
            limit=limit,
            order_by=config.order_by,
            timeout_ms=config.timeout_ms,
            max_chunk_rows=config.max_chunk_rows,
        ).row_count
    return sampler.export_table(
        config.table,
        config.output,
        limit=limit,
        order_by=config.order_by,
        timeout_ms=config.timeout_ms,
    )


def _run_sql_mode(config: SampleConfig, sampler: Sampler) -> int:
    print_step(f"Executing SQL from {config.sql_path}...")
    if config.stream:
        return sampler.export_query_file_stream(
            config.sql_path,
            config.output,
            params=config.params,
            assigns=config.assigns,
            timeout_ms=config.timeout_ms,
            max_chunk_rows=config.max_chunk_rows,
        ).row_count
    return sampler.export_query_file(
        config.sql_path,
        config.output,
        params=config.params,
        assigns=config.assigns,
        timeout_ms=config.timeout_ms,
    )
