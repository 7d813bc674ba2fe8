"""Central UI handler for pasdb.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from pasdb.ui import console, print_header, print_error

    console.print("[success]3 operations[/success]")
    print_header("DATABASE OPERATIONS")
    print_error("Unit not found")
"""

import sys

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

PASDB_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "select": "green",
    "insert": "cyan",
    "update": "yellow",
    "delete": "red",
    "ddl": "magenta",
    "storedprocedure": "blue",
    "unknown": "dim white",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=PASDB_THEME,
    force_terminal=sys.stdout.isatty()
)

# Diagnostics go to stderr so stdout can carry JSON
err_console = Console(theme=PASDB_THEME, stderr=True)


def print_header(title: str) -> None:
    """Print a styled section header with horizontal rules."""
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    """Print an error message in red."""
    err_console.print(f"[error]ERROR:[/error] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning message in yellow."""
    err_console.print(f"[warning]WARNING:[/warning] {msg}")


def operations_table(title: str) -> Table:
    """Empty table with the columns used to list operations."""
    table = Table(title=title, title_justify="left", show_lines=False)
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Method", style="cmd")
    table.add_column("Kind")
    table.add_column("Table", style="path")
    table.add_column("SQL", overflow="fold")
    table.add_column("Params", style="dim")
    table.add_column("Tx", style="dim")
    return table


def styled_kind(kind: str) -> str:
    """Operation kind wrapped in its theme style."""
    return f"[{kind.lower()}]{kind}[/{kind.lower()}]"
