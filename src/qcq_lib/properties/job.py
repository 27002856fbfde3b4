# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, field
from pathlib import Path

from qcq_lib.core.error import JobError
from qcq_lib.programs.interface import ProgramInterface
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.result import JobResult
from qcq_lib.properties.states import JobState


@dataclass
class Job:
    """
    A single computation tracked by the chunk scheduler.

    Attributes:
        program (ProgramInterface): Adapter owning the files of the job.
        procedure (Procedure): Requested computation.
        state (JobState): Current state of the job.
        job_id (str | None): ID of the chunk script the job was submitted in.
        result (JobResult | None): Result of a finished job.
        error (JobError | None): Error of a failed job.
    """

    program: ProgramInterface
    procedure: Procedure
    state: JobState = JobState.PENDING
    job_id: str | None = None
    result: JobResult | None = None
    error: JobError | None = None

    def name(self) -> str:
        return self.program.name()

    def finish(self, result: JobResult) -> None:
        self.state = JobState.FINISHED
        self.result = result

    def fail(self, error: JobError) -> None:
        self.state = JobState.FAILED
        self.error = error

    def toDict(self) -> dict[str, object]:
        """
        Return a summary of the job suitable for serialization.
        """
        data: dict[str, object] = {"name": self.name(), "state": str(self.state)}
        if self.job_id is not None:
            data["job_id"] = self.job_id
        if self.result is not None:
            data.update(self.result.toDict())
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass
class Chunk:
    """
    Jobs submitted together in one script.

    Attributes:
        index (int): Sequential number of the chunk within the batch.
        jobs (list[Job]): Member jobs.
        script (Path): Path to the submission script.
        job_id (str | None): ID returned by the batch system.
        absent_polls (int): Number of consecutive status snapshots missing the ID.
    """

    index: int
    jobs: list[Job]
    script: Path
    job_id: str | None = None
    absent_polls: int = field(default=0)

    def markSubmitted(self, job_id: str) -> None:
        self.job_id = job_id
        for job in self.jobs:
            job.state = JobState.SUBMITTED
            job.job_id = job_id

    def markRunning(self) -> None:
        self.absent_polls = 0
        for job in self.jobs:
            job.state = JobState.RUNNING

    def __len__(self) -> int:
        return len(self.jobs)
