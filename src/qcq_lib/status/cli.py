# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from typing import NoReturn

import click

from qcq_lib.batch import BatchMeta
from qcq_lib.core.click_format import GNUHelpColorsCommand
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger
from qcq_lib.properties.queue_config import QueueConfig

logger = get_logger(__name__)


@click.command(
    short_help="Print the IDs of active jobs.",
    help="Print the IDs of your active jobs or those of a specified user, one per line.",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "-u",
    "--user",
    type=str,
    default=None,
    help="Username whose jobs should be listed. Defaults to your own username.",
)
@click.option(
    "-b",
    "--batch-system",
    type=str,
    default=None,
    help=f"Batch system to query. Defaults to the value of '{CFG.env_vars.batch_system}' or a guess.",
)
def status(user: str | None, batch_system: str | None) -> NoReturn:
    try:
        BatchSystem = BatchMeta.obtain(batch_system)
        config = QueueConfig(user=user) if user else QueueConfig()

        job_ids = BatchSystem(None, config).status()
        if not job_ids:
            logger.info("No active jobs found.")
            sys.exit(0)

        for job_id in sorted(job_ids):
            print(job_id)

        sys.exit(0)
    except QCQError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
