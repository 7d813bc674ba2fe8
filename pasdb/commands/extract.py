"""Extract database operations from Pascal units.

Usage: pasdb extract PATH... [--json]
"""

import json
import sys
from pathlib import Path

import click
from rich.markup import escape

from pasdb.config_runtime import load_runtime_config, options_from_config
from pasdb.extraction import UnitExtractor
from pasdb.extraction.exceptions import ConfigurationError, UnitReadError
from pasdb.ui import console, operations_table, print_error, print_header, print_warning, styled_kind
from pasdb.utils.error_handler import handle_exceptions
from pasdb.utils.exit_codes import ExitCodes
from pasdb.utils.helpers import iter_unit_files, read_unit_source, save_json_file
from pasdb.utils.logging import logger


@click.command("extract")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON instead of tables")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write JSON results to this file",
)
@click.option(
    "--dynamic-sql",
    type=click.Choice(["template", "sentinel"], case_sensitive=False),
    help="Store dynamic SQL as a parameterized template or as the 'Dynamic SQL' sentinel",
)
@click.option(
    "--block-tracking",
    type=click.Choice(["stack", "counter"], case_sensitive=False),
    help="How method bodies are closed (counter = legacy begin/end counting)",
)
@click.option("--no-quote-reserved", is_flag=True, help="Do not double-quote reserved-word identifiers")
@click.option("--unit-name", help="Unit name to record (single unit only; default: file stem)")
@click.option("--include-source", is_flag=True, help="Include each method's original source in JSON")
@click.option("--fail-empty", is_flag=True, help="Exit 1 if no operation was found")
@handle_exceptions
def extract(paths, as_json, output, dynamic_sql, block_tracking, no_quote_reserved,
            unit_name, include_source, fail_empty):
    """Extract the SQL operations embedded in Pascal units.

    Every PATH is a unit file or a directory searched recursively for .pas
    and .dpr files. Each method body is scanned for SQL assigned to query
    components, built by Add() sequences or concatenation, or passed to
    execution helpers. Statements are normalized, classified, and returned
    with their parameters and transaction grouping.

    \b
    EXAMPLES:
      pasdb extract src/CustomerDM.pas
      pasdb extract src/ --json -o operations.json
      pasdb extract src/ --dynamic-sql sentinel --block-tracking counter

    \b
    EXIT CODES:
      0 = Success
      1 = No operations found and --fail-empty given
      3 = One or more units could not be read
    """
    cfg = load_runtime_config(".")
    if dynamic_sql:
        cfg["extraction"]["dynamic_sql_mode"] = dynamic_sql
    if block_tracking:
        cfg["extraction"]["block_tracking"] = block_tracking
    if no_quote_reserved:
        cfg["extraction"]["quote_reserved_words"] = False
    try:
        options = options_from_config(cfg)
    except ConfigurationError as e:
        raise click.UsageError(e.message) from e

    files = list(iter_unit_files(paths))
    if unit_name and len(files) > 1:
        raise click.UsageError("--unit-name can only be used with a single unit")

    extractor = UnitExtractor(options)
    max_size = cfg["limits"]["max_file_size"]
    include_source = include_source or cfg["output"]["include_source"]
    results = []
    unreadable = 0

    for file_path in files:
        if file_path.is_file() and file_path.stat().st_size > max_size:
            print_warning(f"Skipping {file_path}: larger than {max_size} bytes")
            continue
        try:
            source = read_unit_source(file_path)
        except UnitReadError as e:
            print_error(e.message)
            unreadable += 1
            continue

        name = unit_name or file_path.stem
        result = extractor.extract_unit(source, name)
        logger.info(f"{file_path}: {len(result.operations)} operation(s)")
        results.append(result)

    payload = {"units": [result.to_dict(include_source) for result in results]}
    indent = cfg["output"]["json_indent"]

    if as_json:
        click.echo(json.dumps(payload, indent=indent))
    else:
        _print_tables(results)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        save_json_file(payload, output, indent=indent)
        logger.info(f"Results written to {output}")

    exit_code = ExitCodes.SUCCESS
    if unreadable:
        exit_code = ExitCodes.INPUT_UNREADABLE
    elif fail_empty and not any(result.operations for result in results):
        exit_code = ExitCodes.NO_OPERATIONS
    if exit_code != ExitCodes.SUCCESS:
        print_warning(ExitCodes.get_description(exit_code))
        sys.exit(exit_code)


def _print_tables(results) -> None:
    total = sum(len(result.operations) for result in results)
    print_header(f"DATABASE OPERATIONS ({total})")
    for result in results:
        if not result.operations:
            console.print(f"[dim]{escape(result.unit_name)}: no database operations[/dim]")
            continue
        table = operations_table(result.unit_name)
        for op in result.operations:
            table.add_row(
                str(op.source_line_number),
                escape(f"{op.containing_class}.{op.method_name}"),
                styled_kind(op.operation_type.value),
                escape(op.table_name or "-"),
                escape(op.sql_statement),
                escape(", ".join(p.name for p in op.parameters)),
                "yes" if op.is_part_of_transaction else "",
            )
        console.print(table)
        for group in result.transaction_groups:
            console.print(
                f"  [info]{group.group_id}[/info] "
                f"{escape(group.containing_class)}.{escape(group.method_name)}: "
                f"{len(group.operations)} operation(s)"
            )
