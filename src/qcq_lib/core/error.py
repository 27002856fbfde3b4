# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout qcq.

Errors that would corrupt the bookkeeping of a whole batch (submission,
script writing, status parsing) are fatal and propagate to the command line.
`JobError` only concerns a single job and is recorded with that job.
`CleanupError` never leaves the cleanup worker. Each exception carries an
associated exit code used by qcq commands to report failures consistently.
"""

from enum import Enum

from .config import CFG


class QCQError(Exception):
    """Common exception type for all recoverable qcq errors."""

    exit_code = CFG.exit_codes.default


class SubmissionError(QCQError):
    """Raised when the batch system rejects a script and all attempts are exhausted."""

    pass


class ScriptWriteError(QCQError):
    """Raised when a submission script or an input file cannot be written."""

    pass


class StatusParseError(QCQError):
    """Raised when the output of the status command has an unexpected shape."""

    pass


class CleanupError(QCQError):
    """Raised when a scratch file cannot be deleted. Only logged, never propagated."""

    pass


class JobErrorKind(Enum):
    """
    Reason why a single job did not produce a result.
    """

    FILE_NOT_FOUND = 1
    ERROR_IN_OUTPUT = 2
    ENERGY_NOT_FOUND = 3
    ENERGY_PARSE_ERROR = 4
    GEOM_NOT_FOUND = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


class JobError(QCQError):
    """
    Raised when the output of a single job is missing or cannot be parsed.

    Attributes:
        kind (JobErrorKind): Category of the failure.
        file (str): The output file that was read.
    """

    def __init__(self, kind: JobErrorKind, file: str, detail: str | None = None):
        self.kind = kind
        self.file = file
        self.detail = detail
        message = f"{str(kind).capitalize()} in '{file}'"
        super().__init__(f"{message}: {detail}" if detail else message)
