# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from qcq_lib.core.config import CFG
from qcq_lib.drain.cli import drain

MANIFEST = """program: mopac
queue: local
procedure: opt
chunk_size: 2
job_limit: 4
sleep_int: 0
jobs:
  - name: water
    geom: |
      O 0.000 0.000 0.000
      H 0.758 0.000 0.504
      H -0.758 0.000 0.504
  - name: helium
    geom: He 0.0 0.0 0.0
"""

WATER_OUT = """          FINAL HEAT OF FORMATION =        -57.80000 KCAL/MOL
 TOTAL JOB TIME:             0.05 SECONDS
"""


@pytest.fixture
def batch(tmp_path):
    manifest = tmp_path / "batch.yaml"
    manifest.write_text(MANIFEST)
    (tmp_path / "water.out").write_text(WATER_OUT)
    return manifest


def _shell():
    return patch(
        "qcq_lib.batch.interface.interface.subprocess.run",
        return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr=""),
    )


def test_drain_runs_batch(batch, tmp_path):
    runner = CliRunner()

    with _shell() as mock_run:
        result = runner.invoke(drain, [str(batch)])

    assert result.exit_code == 0
    assert "BATCH RESULTS" in result.output
    mock_run.assert_called_once()

    results = yaml.safe_load((tmp_path / CFG.queue_defaults.results_file).read_text())
    assert [r["name"] for r in results] == ["water", "helium"]
    assert results[0]["state"] == "finished"
    assert results[0]["energy"] == pytest.approx(-57.8 / CFG.programs.kcal_per_hartree)
    assert results[1]["state"] == "failed"
    assert "File not found" in results[1]["error"]

    # files of finished jobs are removed, the chunk script stays
    assert not (tmp_path / "water.out").exists()
    assert not (tmp_path / "water.mop").exists()
    assert not (tmp_path / "helium.mop").exists()
    assert (tmp_path / "main0.slurm").exists()


def test_drain_no_del_and_output(batch, tmp_path):
    output = tmp_path / "energies.yaml"
    runner = CliRunner()

    with _shell():
        result = runner.invoke(drain, [str(batch), "--no-del", "-o", str(output)])

    assert result.exit_code == 0
    assert output.is_file()
    assert not (tmp_path / CFG.queue_defaults.results_file).exists()
    assert (tmp_path / "water.out").exists()
    assert (tmp_path / "water.mop").exists()


def test_drain_command_line_overrides(batch, tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    runner = CliRunner()

    with _shell() as mock_run:
        result = runner.invoke(drain, [str(batch), "--dir", str(work), "--chunk-size", "1"])

    assert result.exit_code == 0
    assert mock_run.call_count == 2
    assert (work / "main0.slurm").exists()
    assert (work / "main1.slurm").exists()
    assert (work / CFG.queue_defaults.results_file).exists()


def test_drain_missing_manifest(tmp_path):
    runner = CliRunner()

    result = runner.invoke(drain, [str(tmp_path / "missing.yaml")])

    assert result.exit_code == CFG.exit_codes.default


def test_drain_submission_failure_is_fatal(batch):
    runner = CliRunner()

    with (
        patch(
            "qcq_lib.batch.interface.interface.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="no"),
        ),
        patch("qcq_lib.core.retryer.sleep"),
    ):
        result = runner.invoke(drain, [str(batch)])

    assert result.exit_code == CFG.exit_codes.default


def test_drain_unexpected_error(batch):
    runner = CliRunner()

    with (
        patch("qcq_lib.drain.cli.Dump", MagicMock()),
        patch("qcq_lib.drain.cli.ChunkScheduler") as mock_scheduler,
    ):
        mock_scheduler.return_value.drain.side_effect = RuntimeError("boom")
        result = runner.invoke(drain, [str(batch)])

    assert result.exit_code == CFG.exit_codes.unexpected_error
