from rich.console import Console
from rich.theme import Theme

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)
err_console = Console(theme=custom_theme, stderr=True)

def print_step(message: str) -> None:
    console.print(f"[info]{message}[/info]")

def print_success(message: str) -> None:
    console.print(f"[success]✔ {message}[/success]")

def print_error(message: str) -> None:
    err_console.print(f"[error]✘ {message}[/error]")
