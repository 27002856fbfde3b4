# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import getpass
import os
from dataclasses import dataclass, field
from pathlib import Path

from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.properties.template import Template


def _current_user() -> str:
    """Return the name of the user whose jobs are queried."""
    return os.environ.get(CFG.env_vars.user) or getpass.getuser()


@dataclass(frozen=True)
class QueueConfig:
    """
    Immutable configuration of one batch run.

    Attributes:
        chunk_size (int): Number of jobs submitted together in one script.
        job_limit (int): Maximal number of concurrently outstanding jobs.
        sleep_int (float): Interval (in seconds) between status polls and between submission attempts.
        dir (Path): Working directory for inputs, outputs, and scripts.
        no_del (bool): Keep the files of finished jobs instead of deleting them.
        template (Template | None): Custom header of submission scripts.
        user (str): User whose jobs are queried by the status command.
    """

    chunk_size: int = CFG.queue_defaults.chunk_size
    job_limit: int = CFG.queue_defaults.job_limit
    sleep_int: float = CFG.queue_defaults.sleep_int
    dir: Path = field(default_factory=lambda: Path(CFG.queue_defaults.dir))
    no_del: bool = False
    template: Template | None = None
    user: str = field(default_factory=_current_user)

    def __post_init__(self):
        if self.chunk_size < 1:
            raise QCQError(f"Chunk size must be at least 1, not {self.chunk_size}.")
        if self.job_limit < self.chunk_size:
            raise QCQError(
                f"Job limit ({self.job_limit}) must not be lower than the chunk size ({self.chunk_size})."
            )
        if self.sleep_int < 0:
            raise QCQError(f"Poll interval cannot be negative ({self.sleep_int}).")
        if not isinstance(self.dir, Path):
            object.__setattr__(self, "dir", Path(self.dir))
