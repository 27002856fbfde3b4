# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from pathlib import Path
from typing import NoReturn

import click

from qcq_lib.core.click_format import GNUHelpColorsCommand
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

from .clearer import Clearer

logger = get_logger(__name__)


@click.command(
    short_help="Delete files left behind by qcq.",
    help=f"""Delete submission scripts, script logs, and program inputs and outputs from a directory.

{click.style("DIR", fg="green")}   Directory to clear. Defaults to the current directory.

`{CFG.binary_name} clear` asks for confirmation unless `--yes` is given.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "directory",
    type=str,
    default=".",
    required=False,
    metavar=click.style("DIR", fg="green"),
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Delete the files without asking for confirmation.",
)
def clear(directory: str, yes: bool) -> NoReturn:
    """
    Delete files left behind by qcq.
    """
    try:
        Clearer(Path(directory)).clear(force=yes)
        sys.exit(0)
    except QCQError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
