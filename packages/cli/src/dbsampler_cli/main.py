#!/usr/bin/env python3
"""Command line entry point for dbsampler."""
import typer
import sys
import pathlib
from typing import List, Optional
from typing_extensions import Annotated

from dbsampler import Sampler, SamplerSettings
from dbsampler.common.logger import configure_logging

from dbsampler_cli.commands.info import list_available_adapters
from dbsampler_cli.commands.sample import parse_value, parse_vars, run_sample
from dbsampler_cli.common.decorators import handle_cli_errors
from dbsampler_cli.console import print_error
from dbsampler_cli.types import SampleConfig

app = typer.Typer(
    name="dbsampler",
    help="Sample database tables and SQL queries to NDJSON.",
    no_args_is_help=True,
    add_completion=False,
)


def build_sampler(settings: SamplerSettings) -> Sampler:
    return Sampler.from_settings(settings)


@app.command()
@handle_cli_errors("sample")
def sample(
    ctx: typer.Context,
    table: Annotated[Optional[str], typer.Option("--table", "-t", help="Table to sample (table mode)")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", min=0, help="Number of rows (default: DBSAMPLER_LIMIT or 100)")] = None,
    order: Annotated[Optional[str], typer.Option("--order", "-r", help="ORDER BY clause, e.g. 'created_at DESC'")] = None,
    sql: Annotated[Optional[pathlib.Path], typer.Option("--sql", "-s", help="Path to a Jinja2 SQL template (SQL mode)")] = None,
    var: Annotated[Optional[List[str]], typer.Option("--var", help="Template variable KEY=VALUE (repeatable)")] = None,
    param: Annotated[Optional[List[str]], typer.Option("--param", help="Positional $n parameter (repeatable)")] = None,
    output: Annotated[pathlib.Path, typer.Option("--output", "-o", help="Output NDJSON file")] = pathlib.Path("sample.ndjson"),
    timeout: Annotated[Optional[int], typer.Option("--timeout", min=1, help="Query timeout in ms (default: 60000)")] = None,
    stream: Annotated[bool, typer.Option("--stream/--no-stream", help="Stream rows to the file chunk by chunk")] = False,
    max_rows: Annotated[Optional[int], typer.Option("--max-rows", min=1, help="Rows fetched per chunk when streaming")] = None,
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment name (dev, test, prod); loads .env.<env>")] = None,
):
    """
    Sample rows from a table, or run a SQL template, and write them as NDJSON.

    Examples:

        dbsampler sample -t users -l 50

        dbsampler sample --table orders --order "created_at DESC" --stream

        dbsampler sample --sql queries/report.sql.j2 --var days=7
    """
    if not table and sql is None:
        typer.echo(ctx.get_help())
        sys.exit(2)

    if sql is not None and not sql.is_file():
        print_error(f"SQL file not found: {sql}")
        sys.exit(1)

    config = SampleConfig(
        table=table,
        limit=limit,
        order_by=order,
        sql_path=sql,
        assigns=parse_vars(var or []),
        params=[parse_value(value) for value in param or []],
        output=output,
        timeout_ms=timeout,
        stream=stream,
        max_chunk_rows=max_rows,
    )

    settings = SamplerSettings.for_env(env)
    configure_logging(settings.log_level, settings.log_json)

    sampler = build_sampler(settings)
    try:
        run_sample(config, sampler)
    finally:
        sampler.database.close()


@app.command()
def adapters():
    """
    List installed database adapters.
    """
    list_available_adapters()


if __name__ == "__main__":
    app()
