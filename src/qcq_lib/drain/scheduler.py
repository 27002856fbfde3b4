# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections import deque
from time import sleep

from qcq_lib.batch.interface import BatchInterface
from qcq_lib.core.common import partition
from qcq_lib.core.config import CFG
from qcq_lib.core.error import JobError
from qcq_lib.core.logger import get_logger
from qcq_lib.core.repeater import Repeater
from qcq_lib.properties.job import Chunk, Job

from .dump import Dump

logger = get_logger(__name__, show_time=True)


class ChunkScheduler:
    """
    Submits jobs in chunks, keeps the number of outstanding jobs below the limit,
    and collects the results of finished chunks.

    A chunk is finished once the batch system stops listing its ID for
    `CFG.scheduler.absent_polls` consecutive status snapshots. Chunks of
    synchronous backends are finished as soon as they are submitted.

    Note that a finished chunk whose ID is reused by a new job between two
    polls looks like it is still running.
    """

    def __init__(self, backend: BatchInterface, dump: Dump | None = None):
        """
        Args:
            backend (BatchInterface): Backend used to write and submit chunk scripts.
            dump (Dump | None): Worker deleting the files of finished jobs.
                A new one is started if not provided.
        """
        self._backend = backend
        self._config = backend.config()
        self._dump = dump or Dump()

        self._chunks: deque[list[Job]] = deque()
        self._active: list[Chunk] = []
        self._submitted = 0
        self._rounds = 0

    def drain(self, jobs: list[Job]) -> list[Job]:
        """
        Run all jobs to completion.

        The dump is shut down (and drained) before returning, also on failure.

        Args:
            jobs (list[Job]): Jobs to run. Their states, results and errors are updated in place.

        Returns:
            list[Job]: The provided jobs.

        Raises:
            SubmissionError: If a chunk cannot be submitted.
            ScriptWriteError: If an input or a script cannot be written.
            StatusParseError: If the status of the batch system cannot be read.
            QCQError: For other failures fatal for the whole batch.
        """
        self._chunks = deque(partition(jobs, self._config.chunk_size))
        logger.info(
            f"Running {len(jobs)} jobs in {len(self._chunks)} chunks using {self._backend.envName()}."
        )

        try:
            while self._chunks or self._active:
                self._submitChunks()

                if self._backend.isSynchronous():
                    finished = list(self._active)
                else:
                    sleep(self._config.sleep_int)
                    finished = self._poll()

                for chunk in finished:
                    self._active.remove(chunk)
                    self._collect(chunk)

                self._rounds += 1
                self._report(jobs)
        finally:
            self._dump.shutdown()

        return jobs

    def outstanding(self) -> int:
        """Return the number of jobs submitted and not yet collected."""
        return sum(len(chunk) for chunk in self._active)

    def _submitChunks(self) -> None:
        """
        Submit pending chunks as long as the job limit allows.
        """
        while (
            self._chunks
            and self.outstanding() + len(self._chunks[0]) <= self._config.job_limit
        ):
            self._active.append(self._submitChunk(self._chunks.popleft()))

    def _submitChunk(self, jobs: list[Job]) -> Chunk:
        """
        Write the inputs and the script of a chunk and submit it.
        """
        script = (
            self._config.dir
            / f"{CFG.scheduler.script_stem}{self._submitted}.{self._backend.scriptExtension()}"
        )
        chunk = Chunk(index=self._submitted, jobs=jobs, script=script)
        self._submitted += 1

        for job in jobs:
            job.program.writeInput(job.procedure)

        self._backend.writeSubmitScript([job.program.filename() for job in jobs], script)
        chunk.markSubmitted(self._backend.submit(script))

        logger.debug(
            f"Submitted chunk {chunk.index} ({len(chunk)} jobs) as '{chunk.job_id}'."
        )
        return chunk

    def _poll(self) -> list[Chunk]:
        """
        Query the batch system and return the chunks that have finished.
        """
        active_ids = self._backend.status()

        finished = []
        for chunk in self._active:
            if chunk.job_id in active_ids:
                chunk.markRunning()
                continue

            chunk.absent_polls += 1
            if chunk.absent_polls >= CFG.scheduler.absent_polls:
                finished.append(chunk)

        return finished

    def _collect(self, chunk: Chunk) -> None:
        """
        Read the results of all jobs of a finished chunk and dispose of their files.
        """
        repeater = Repeater(chunk.jobs, ChunkScheduler._collectJob)
        repeater.onException(JobError, ChunkScheduler._handleJobError)
        repeater.run()

        if not self._config.no_del:
            for job in chunk.jobs:
                for file in job.program.associatedFiles():
                    self._dump.send(file)

        logger.info(
            f"Chunk {chunk.index} finished: {len(repeater.results)} of {len(chunk)} jobs succeeded."
        )

    def _report(self, jobs: list[Job]) -> None:
        """
        Log the progress of the batch every `CFG.scheduler.report_every` rounds of the main loop.
        """
        if self._rounds % CFG.scheduler.report_every != 0:
            return

        completed = sum(1 for job in jobs if job.state.isCompleted())
        logger.info(
            f"{sum(len(c) for c in self._chunks)} pending, {self.outstanding()} active, {completed} completed."
        )

    @staticmethod
    def _collectJob(job: Job) -> None:
        job.finish(job.program.readOutput())

    @staticmethod
    def _handleJobError(exception: BaseException, metadata: Repeater) -> None:
        job: Job = metadata.currentItem()
        job.fail(exception)  # ty: ignore[invalid-argument-type]
        logger.warning(f"Job '{job.name()}' failed: {exception}")
