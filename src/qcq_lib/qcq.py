# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click

from qcq_lib.clear.cli import clear
from qcq_lib.core.click_format import GNUHelpColorsGroup
from qcq_lib.drain.cli import drain
from qcq_lib.status.cli import status

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=GNUHelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of qcq and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any qcq command.

    qcq dispatches large batches of quantum-chemistry jobs onto a batch system
    or a local shell, collects their results, and cleans up after them.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(drain)
cli.add_command(status)
cli.add_command(clear)
