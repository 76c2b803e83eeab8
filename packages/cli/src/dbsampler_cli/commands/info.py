from rich.table import Table

from dbsampler.datasources.discovery import discover_adapters
from dbsampler_cli.console import console


def list_available_adapters() -> None:
    """Discovers and displays all installed database adapters."""
    adapters = discover_adapters()

    if not adapters:
        console.print("[warning]No adapters found. Install dbsampler with the adapter you need (e.g. dbsampler[postgres]).[/warning]")
        return

    table = Table(title="Installed Database Adapters")
    table.add_column("Adapter ID", style="cyan", no_wrap=True)
    table.add_column("Class", style="magenta")

    for name, cls in sorted(adapters.items()):
        table.add_row(name, f"{cls.__module__}.{cls.__name__}")

    console.print(table)
