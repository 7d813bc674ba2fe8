"""List the methods the locator finds in a unit.

Usage: pasdb methods PATH
"""

import json
import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from pasdb.extraction.detector import is_database_active
from pasdb.extraction.exceptions import UnitReadError
from pasdb.extraction.fields import extract_field_names
from pasdb.extraction.methods import locate_methods
from pasdb.extraction.models import BlockTracking
from pasdb.extraction.scanner import scan_source
from pasdb.ui import console, print_error
from pasdb.utils.error_handler import handle_exceptions
from pasdb.utils.exit_codes import ExitCodes
from pasdb.utils.helpers import read_unit_source


@click.command("methods")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--block-tracking",
    type=click.Choice(["stack", "counter"], case_sensitive=False),
    default="stack",
    show_default=True,
    help="How method bodies are closed",
)
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@handle_exceptions
def methods(path, block_tracking, as_json):
    """Show every method body located in a unit.

    Debugging aid for the method locator: for each implementation header it
    shows where the body starts, how long it is, whether the database-activity
    gate fires and which dataset fields the body reads by name.
    """
    try:
        source = read_unit_source(path)
    except UnitReadError as e:
        print_error(e.message)
        sys.exit(ExitCodes.INPUT_UNREADABLE)

    text = scan_source(source).text
    rows = []
    for method in locate_methods(text, BlockTracking(block_tracking.lower())):
        rows.append({
            "class_name": method.class_name,
            "method_name": method.method_name,
            "kind": method.kind,
            "header_line": method.header_line,
            "body_line": method.start_line if method.body else None,
            "body_length": len(method.body),
            "terminated": method.terminated,
            "database_active": bool(method.body) and is_database_active(method.body),
            "fields": extract_field_names(method.body),
        })

    if as_json:
        click.echo(json.dumps({"unit": path.stem, "methods": rows}, indent=2))
        return

    table = Table(title=path.name, title_justify="left")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Method", style="cmd")
    table.add_column("Kind")
    table.add_column("Body", justify="right")
    table.add_column("DB", justify="center")
    table.add_column("Fields", style="dim", overflow="fold")
    for row in rows:
        body = str(row["body_length"]) if row["body_length"] else "-"
        if row["body_length"] and not row["terminated"]:
            body += " (open)"
        table.add_row(
            str(row["header_line"]),
            escape(f"{row['class_name']}.{row['method_name']}"),
            row["kind"],
            body,
            "[success]yes[/success]" if row["database_active"] else "",
            escape(", ".join(row["fields"])),
        )
    console.print(table)
