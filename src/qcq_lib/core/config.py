# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for qcq.

This module defines dataclasses representing all configurable aspects of qcq,
including file suffixes, environment variables, submission retries, status
polling, the cleanup worker, batch-system and program options, presentation
settings, and global defaults.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class FileSuffixes:
    """File suffixes used by qcq."""

    # Suffix for PBS submission scripts.
    pbs_script: str = ".pbs"
    # Suffix for local submission scripts.
    local_script: str = ".slurm"
    # Suffix for logs written by submission scripts.
    script_log: str = ".out"
    # Suffix for MOPAC input files.
    mopac_input: str = ".mop"
    # Suffix for Molpro input files.
    molpro_input: str = ".inp"
    # Suffix for program output files.
    output: str = ".out"
    # Additional MOPAC output files.
    mopac_extra: list[str] = field(default_factory=lambda: [".arc", ".aux"])

    @property
    def script_suffixes(self) -> list[str]:
        """List of suffixes of submission scripts."""
        return [self.pbs_script, self.local_script]

    @property
    def scratch_suffixes(self) -> list[str]:
        """List of suffixes of all files qcq may leave behind in a working directory."""
        return list(
            dict.fromkeys(
                [
                    *self.script_suffixes,
                    self.script_log,
                    self.mopac_input,
                    self.molpro_input,
                    self.output,
                    *self.mopac_extra,
                ]
            )
        )


@dataclass
class EnvironmentVariables:
    """Environment variable names used by qcq."""

    # Enables qcq debug mode.
    debug_mode: str = "QCQ_DEBUG"
    # Name of the batch system to use.
    batch_system: str = "QCQ_BATCH_SYSTEM"
    # Explicit path to the qcq configuration file.
    config: str = "QCQ_CONFIG"
    # Name of the user whose jobs are queried.
    user: str = "USER"


@dataclass
class SubmitterSettings:
    """Settings for submitting chunk scripts."""

    # Total number of attempts to submit one script.
    retry_tries: int = 5
    # Wait time (in seconds) between attempts. If None, the poll interval of the queue is used.
    retry_wait: float | None = None
    # Identifier used when the submit command prints nothing.
    no_job_id: str = "no jobid"


@dataclass
class StatusSettings:
    """Settings for querying the batch system for active jobs."""

    # Total number of attempts to run the status command.
    retry_tries: int = 3
    # Wait time (in seconds) between attempts.
    retry_wait: float = 5


@dataclass
class SchedulerSettings:
    """Settings for the chunk scheduler."""

    # Number of consecutive status snapshots a job ID must be missing from
    # before its chunk is considered finished.
    absent_polls: int = 2
    # Number of scheduler rounds between two progress reports.
    report_every: int = 10
    # Stem of the chunk submission scripts.
    script_stem: str = "main"


@dataclass
class DumpSettings:
    """Settings for the background cleanup worker."""

    # Maximal number of queued filenames. 0 means unbounded.
    max_queued: int = 0
    # Name of the worker thread.
    thread_name: str = "qcq-dump"


@dataclass
class PBSOptions:
    """Options associated with PBS."""

    # Command used to submit scripts.
    submit_command: str = "qsub"
    # Command used to query active jobs.
    status_command: str = "qstat"
    # Number of whitespace-separated fields of a `qstat -u` row.
    qstat_columns: int = 11
    # Marker of the divider between the header and the rows of `qstat -u`.
    divider: str = "-----------"


@dataclass
class LocalOptions:
    """Options associated with the local executor."""

    # Command used to run scripts.
    submit_command: str = "bash"
    # Separator written between jobs in the script log.
    separator: str = "================"


@dataclass
class ProgramSettings:
    """Locations and options of the supported quantum-chemistry programs."""

    # Path to the MOPAC executable.
    mopac: str = "/opt/mopac/mopac"
    # Library path exported before running MOPAC locally.
    mopac_ld_library_path: str | None = "/opt/mopac/"
    # Name of the Molpro executable.
    molpro: str = "molpro"
    # Conversion factor between kcal/mol and hartree.
    kcal_per_hartree: float = 627.5091809


@dataclass
class QueueDefaults:
    """Default values of the queue configuration."""

    # Number of jobs submitted in one script.
    chunk_size: int = 128
    # Maximal number of concurrently outstanding jobs.
    job_limit: int = 1600
    # Interval (in seconds) between status polls.
    sleep_int: int = 60
    # Working directory for inputs, outputs, and scripts.
    dir: str = "."
    # Name of the results file written into the working directory.
    results_file: str = "results.yaml"


@dataclass
class PresenterSettings:
    """Settings for presenting results of a batch."""

    # Maximal width of the results panel.
    max_width: int | None = None
    # Minimal width of the results panel.
    min_width: int | None = 60
    # Maximal number of failed jobs listed individually.
    max_failed_listed: int = 20
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Style used for finished jobs.
    finished_style: str = "bright_green"
    # Style used for failed jobs.
    failed_style: str = "bright_red"
    # Style used for jobs that never finished.
    other_style: str = "grey70"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by qcq.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Default error code for failures of qcq commands.
    default: int = 91
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class Config:
    """Main configuration for qcq."""

    suffixes: FileSuffixes = field(default_factory=FileSuffixes)
    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    submitter: SubmitterSettings = field(default_factory=SubmitterSettings)
    status: StatusSettings = field(default_factory=StatusSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)
    dump: DumpSettings = field(default_factory=DumpSettings)
    pbs: PBSOptions = field(default_factory=PBSOptions)
    local: LocalOptions = field(default_factory=LocalOptions)
    programs: ProgramSettings = field(default_factory=ProgramSettings)
    queue_defaults: QueueDefaults = field(default_factory=QueueDefaults)
    presenter: PresenterSettings = field(default_factory=PresenterSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the qcq binary.
    binary_name: str = "qcq"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read qcq config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path) if (env_path := os.getenv("QCQ_CONFIG")) else None,
            # 2. Current working directory
            Path.cwd() / "qcq_config.toml",
            # 3. XDG config home
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "qcq"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses properly.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for qcq.
CFG = Config.load()
