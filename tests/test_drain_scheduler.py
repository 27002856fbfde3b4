# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from qcq_lib.core.error import JobError, JobErrorKind, SubmissionError
from qcq_lib.drain.scheduler import ChunkScheduler
from qcq_lib.properties.job import Job
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.queue_config import QueueConfig
from qcq_lib.properties.result import JobResult
from qcq_lib.properties.states import JobState


class FakeProgram:
    """Program adapter that never touches the filesystem."""

    def __init__(self, filename: Path, fail: bool = False):
        self._filename = filename
        self._fail = fail
        self.written: Procedure | None = None

    def name(self) -> str:
        return self._filename.name

    def filename(self) -> Path:
        return self._filename

    def writeInput(self, procedure: Procedure) -> None:
        self.written = procedure

    def readOutput(self) -> JobResult:
        if self._fail:
            raise JobError(JobErrorKind.ENERGY_NOT_FOUND, f"{self._filename}.out")
        return JobResult(energy=-1.0, time=1.0)

    def associatedFiles(self) -> list[Path]:
        return [
            self._filename.with_name(f"{self._filename.name}.inp"),
            self._filename.with_name(f"{self._filename.name}.out"),
        ]


class FakeBackend:
    """
    Backend listing every submitted script for a given number of status snapshots.
    """

    def __init__(self, config: QueueConfig, lifetimes=None, synchronous=False):
        self._config = config
        self._lifetimes = lifetimes or {}
        self._synchronous = synchronous
        self._stems: list[Path] = []
        self.scripts: list[tuple[str, int]] = []
        self.listed: dict[str, int] = {}
        self.status_calls = 0
        self.peak = 0
        self.scheduler: ChunkScheduler | None = None

    def config(self) -> QueueConfig:
        return self._config

    def envName(self) -> str:
        return "Fake"

    def isSynchronous(self) -> bool:
        return self._synchronous

    def scriptExtension(self) -> str:
        return "sh"

    def writeSubmitScript(self, input_stems, script_path) -> None:
        self._stems = input_stems

    def submit(self, script_path) -> str:
        job_id = f"{len(self.scripts)}.fake"
        self.scripts.append((script_path.name, self.status_calls))
        self.listed[job_id] = 0
        if self.scheduler:
            self.peak = max(self.peak, self.scheduler.outstanding() + len(self._stems))
        return job_id

    def status(self) -> set[str]:
        self.status_calls += 1
        active = set()
        for job_id, listed in self.listed.items():
            if listed < self._lifetimes.get(job_id, 1):
                self.listed[job_id] = listed + 1
                active.add(job_id)
        return active


def _jobs(tmp_path, n, failing=()):
    return [
        Job(FakeProgram(tmp_path / f"job{i}", fail=i in failing), Procedure.OPT)
        for i in range(n)
    ]


def _scheduler(backend, dump=None):
    scheduler = ChunkScheduler(backend, dump or MagicMock())
    backend.scheduler = scheduler
    return scheduler


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("qcq_lib.drain.scheduler.sleep") as mock_sleep:
        yield mock_sleep


def test_drain_respects_job_limit(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=100, job_limit=200, sleep_int=0, user="alice")
    backend = FakeBackend(config, lifetimes={"0.fake": 1, "1.fake": 5})
    scheduler = _scheduler(backend)
    jobs = _jobs(tmp_path, 300)

    result = scheduler.drain(jobs)

    assert result is jobs
    # the third chunk waits until the first one disappears from two snapshots
    assert backend.scripts == [("main0.sh", 0), ("main1.sh", 0), ("main2.sh", 3)]
    assert backend.peak == 200
    assert backend.status_calls == 7
    assert scheduler.outstanding() == 0
    assert all(job.state == JobState.FINISHED for job in jobs)
    assert all(job.program.written == Procedure.OPT for job in jobs)


def test_drain_fills_limit_with_partial_chunk(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=100, job_limit=250, sleep_int=0, user="alice")
    backend = FakeBackend(config)
    scheduler = _scheduler(backend)

    scheduler.drain(_jobs(tmp_path, 250))

    assert [submitted for _, submitted in backend.scripts] == [0, 0, 0]
    assert backend.peak == 250


def test_drain_assigns_job_ids(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=2, job_limit=10, sleep_int=0, user="alice")
    jobs = _jobs(tmp_path, 5)

    _scheduler(FakeBackend(config)).drain(jobs)

    assert [job.job_id for job in jobs] == ["0.fake", "0.fake", "1.fake", "1.fake", "2.fake"]


def test_drain_records_failed_jobs(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=3, job_limit=3, sleep_int=0, user="alice")
    dump = MagicMock()
    jobs = _jobs(tmp_path, 3, failing={1})

    _scheduler(FakeBackend(config), dump).drain(jobs)

    assert [job.state for job in jobs] == [JobState.FINISHED, JobState.FAILED, JobState.FINISHED]
    assert jobs[1].error.kind == JobErrorKind.ENERGY_NOT_FOUND
    assert jobs[1].result is None
    assert jobs[0].result.energy == -1.0
    # files of failed jobs are removed as well
    assert dump.send.call_count == 6
    dump.shutdown.assert_called_once()


def test_drain_no_del_keeps_files(tmp_path):
    config = QueueConfig(
        dir=tmp_path, chunk_size=2, job_limit=4, sleep_int=0, no_del=True, user="alice"
    )
    dump = MagicMock()

    _scheduler(FakeBackend(config), dump).drain(_jobs(tmp_path, 4))

    dump.send.assert_not_called()
    dump.shutdown.assert_called_once()


def test_drain_sends_associated_files(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=1, job_limit=1, sleep_int=0, user="alice")
    dump = MagicMock()

    _scheduler(FakeBackend(config), dump).drain(_jobs(tmp_path, 1))

    assert [c.args[0] for c in dump.send.call_args_list] == [
        tmp_path / "job0.inp",
        tmp_path / "job0.out",
    ]


def test_drain_synchronous_backend_never_polls(tmp_path, no_sleep):
    config = QueueConfig(dir=tmp_path, chunk_size=2, job_limit=2, sleep_int=30, user="alice")
    backend = FakeBackend(config, synchronous=True)
    jobs = _jobs(tmp_path, 5)

    _scheduler(backend).drain(jobs)

    assert [name for name, _ in backend.scripts] == ["main0.sh", "main1.sh", "main2.sh"]
    assert backend.status_calls == 0
    no_sleep.assert_not_called()
    assert all(job.state == JobState.FINISHED for job in jobs)


def test_drain_sleeps_between_polls(tmp_path, no_sleep):
    config = QueueConfig(dir=tmp_path, chunk_size=5, job_limit=5, sleep_int=12, user="alice")
    backend = FakeBackend(config)

    _scheduler(backend).drain(_jobs(tmp_path, 5))

    assert no_sleep.call_count == backend.status_calls
    no_sleep.assert_called_with(12)


def test_drain_empty(tmp_path):
    config = QueueConfig(dir=tmp_path, sleep_int=0, user="alice")
    backend = FakeBackend(config)
    dump = MagicMock()

    assert _scheduler(backend, dump).drain([]) == []
    assert backend.scripts == []
    dump.shutdown.assert_called_once()


def test_drain_submission_error_shuts_down_dump(tmp_path):
    config = QueueConfig(dir=tmp_path, chunk_size=2, job_limit=2, sleep_int=0, user="alice")
    backend = FakeBackend(config)
    backend.submit = MagicMock(side_effect=SubmissionError("rejected"))
    dump = MagicMock()

    with pytest.raises(SubmissionError, match="rejected"):
        _scheduler(backend, dump).drain(_jobs(tmp_path, 2))

    dump.shutdown.assert_called_once()
