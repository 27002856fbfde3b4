# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import dataclasses
from pathlib import Path

import pytest

from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.properties.queue_config import QueueConfig


def test_queue_config_defaults(monkeypatch):
    monkeypatch.setenv(CFG.env_vars.user, "alice")
    config = QueueConfig()

    assert config.chunk_size == CFG.queue_defaults.chunk_size
    assert config.job_limit == CFG.queue_defaults.job_limit
    assert config.sleep_int == CFG.queue_defaults.sleep_int
    assert config.dir == Path(CFG.queue_defaults.dir)
    assert config.no_del is False
    assert config.template is None
    assert config.user == "alice"


def test_queue_config_falls_back_to_getpass(monkeypatch):
    monkeypatch.delenv(CFG.env_vars.user, raising=False)
    monkeypatch.setattr("qcq_lib.properties.queue_config.getpass.getuser", lambda: "bob")

    assert QueueConfig().user == "bob"


def test_queue_config_coerces_dir():
    config = QueueConfig(dir="some/where")  # ty: ignore[invalid-argument-type]

    assert config.dir == Path("some/where")


def test_queue_config_is_immutable():
    config = QueueConfig(user="alice")

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.chunk_size = 5  # ty: ignore[invalid-assignment]


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"chunk_size": 0}, "Chunk size"),
        ({"chunk_size": 100, "job_limit": 99}, "Job limit"),
        ({"sleep_int": -1}, "Poll interval"),
    ],
)
def test_queue_config_validation(kwargs, message):
    with pytest.raises(QCQError, match=message):
        QueueConfig(user="alice", **kwargs)


def test_queue_config_job_limit_equal_to_chunk_size_is_valid():
    config = QueueConfig(chunk_size=10, job_limit=10, sleep_int=0, user="alice")

    assert config.job_limit == 10
