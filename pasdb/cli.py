"""pasdb CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from pasdb import __version__
from pasdb.utils.constants import PASDB_DIR
from pasdb.utils.logging import configure_file_logging, logger


@click.group()
@click.version_option(version=__version__, prog_name="pasdb")
@click.help_option("-h", "--help")
@click.option("--log-to-file", is_flag=True, help="Also write a debug log to .pasdb/pasdb.log")
@click.pass_context
def cli(ctx, log_to_file):
    """pasdb - SQL operation extraction for Pascal/Delphi units

    \b
    QUICK START:
      pasdb extract src/                # Tables of every operation
      pasdb extract src/ --json         # Machine-readable output
      pasdb methods src/OrdersDM.pas    # Inspect located method bodies

    \b
    For detailed options: pasdb <command> --help"""
    if log_to_file:
        handler_id = configure_file_logging(PASDB_DIR)
        ctx.call_on_close(lambda: logger.remove(handler_id))


from pasdb.commands.extract import extract
from pasdb.commands.methods import methods

cli.add_command(extract)
cli.add_command(methods)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
