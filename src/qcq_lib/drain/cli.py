# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from pathlib import Path
from typing import NoReturn

import click
from click_option_group import optgroup
from rich.console import Console

from qcq_lib.core.click_format import GNUHelpColorsCommand
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

from .dump import Dump
from .manifest import Manifest, write_results
from .presenter import ResultsPresenter
from .scheduler import ChunkScheduler

logger = get_logger(__name__)


@click.command(
    short_help="Run a batch of jobs described by a manifest.",
    help=f"""
Run all jobs described by a YAML manifest to completion.

{click.style("MANIFEST", fg="green")}   Path to the manifest describing the batch.

Jobs are submitted in chunks, their results are collected once the chunks
finish, and the files of finished jobs are deleted unless `--no-del` is set.
Options given on the command line override the values from the manifest.
""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("manifest", type=str, metavar=click.style("MANIFEST", fg="green"))
@optgroup.group(f"{click.style('General settings', fg='yellow')}")
@optgroup.option(
    "--queue",
    "-q",
    type=str,
    default=None,
    help=f"Batch system to use (PBS or Local). Defaults to the value of '{CFG.env_vars.batch_system}' or a guess.",
)
@optgroup.option(
    "--dir",
    "-d",
    "directory",
    type=str,
    default=None,
    help="Working directory for inputs, outputs, and submission scripts.",
)
@optgroup.option(
    "--no-del",
    is_flag=True,
    default=False,
    help="Keep the files of finished jobs.",
)
@optgroup.option(
    "--output",
    "-o",
    type=str,
    default=None,
    help="File to write the results into. Defaults to 'results.yaml' in the working directory.",
)
@optgroup.group(f"{click.style('Scheduling', fg='yellow')}")
@optgroup.option(
    "--chunk-size",
    type=int,
    default=None,
    help=f"Number of jobs submitted together in one script. Defaults to {CFG.queue_defaults.chunk_size}.",
)
@optgroup.option(
    "--job-limit",
    type=int,
    default=None,
    help=f"Maximal number of jobs in the batch system at once. Defaults to {CFG.queue_defaults.job_limit}.",
)
@optgroup.option(
    "--sleep-int",
    type=float,
    default=None,
    help=f"Seconds between two status polls. Defaults to {CFG.queue_defaults.sleep_int}.",
)
def drain(
    manifest: str,
    queue: str | None,
    directory: str | None,
    no_del: bool,
    output: str | None,
    chunk_size: int | None,
    job_limit: int | None,
    sleep_int: float | None,
) -> NoReturn:
    """
    Run a batch of jobs described by a manifest.
    """
    try:
        loaded = Manifest.fromFile(
            Path(manifest),
            queue=queue,
            dir=str(Path(directory).resolve()) if directory else None,
            no_del=no_del or None,
            chunk_size=chunk_size,
            job_limit=job_limit,
            sleep_int=sleep_int,
        )

        jobs = loaded.buildJobs()
        scheduler = ChunkScheduler(loaded.buildBackend(), Dump())
        scheduler.drain(jobs)

        results_file = Path(output) if output else loaded.config.dir / CFG.queue_defaults.results_file
        write_results(jobs, results_file)

        console = Console(record=False, markup=False)
        console.print(ResultsPresenter(jobs).createResultsPanel(console))
        logger.info(f"Results written into '{results_file}'.")

        sys.exit(0)
    except QCQError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
