# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

import pytest
import yaml

from qcq_lib.batch import PBS, Local
from qcq_lib.core.config import CFG
from qcq_lib.core.error import JobError, JobErrorKind, QCQError
from qcq_lib.drain.manifest import Manifest, write_results
from qcq_lib.programs import Molpro, Mopac
from qcq_lib.properties.geom import Atom
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.result import JobResult
from qcq_lib.properties.states import JobState

MANIFEST = """program: mopac
queue: pbs
procedure: single-point
charge: 1
chunk_size: 2
job_limit: 4
sleep_int: 5
jobs:
  - name: water
    geom: |
      O 0.000 0.000 0.000
      H 0.758 0.000 0.504
      H -0.758 0.000 0.504
  - geom: |
      He 0.0 0.0 0.0
"""


def _write(directory: Path, content: str) -> Path:
    file = directory / "batch.yaml"
    file.write_text(content)
    return file


def test_manifest_from_file(tmp_path):
    manifest = Manifest.fromFile(_write(tmp_path, MANIFEST))

    assert manifest.program is Mopac
    assert manifest.batch_system is PBS
    assert manifest.procedure == Procedure.SINGLE_PT
    assert manifest.charge == 1
    assert manifest.template.header == Mopac.DEFAULT_TEMPLATE
    assert manifest.config.chunk_size == 2
    assert manifest.config.job_limit == 4
    assert manifest.config.sleep_int == 5.0
    assert manifest.config.dir == tmp_path.resolve()
    assert manifest.config.no_del is False
    assert manifest.config.template is None
    assert [entry.name for entry in manifest.entries] == ["water", "job1"]
    assert manifest.entries[1].geom.xyz == (Atom("He", 0.0, 0.0, 0.0),)


def test_manifest_overrides(tmp_path):
    other = tmp_path / "other"
    other.mkdir()

    manifest = Manifest.fromFile(
        _write(tmp_path, MANIFEST),
        queue="local",
        dir=str(other),
        chunk_size=1,
        job_limit=None,
        no_del=True,
    )

    assert manifest.batch_system is Local
    assert manifest.config.dir == other
    assert manifest.config.chunk_size == 1
    assert manifest.config.job_limit == 4
    assert manifest.config.no_del is True


def test_manifest_defaults(tmp_path):
    manifest = Manifest.fromDict(
        {"program": "molpro", "queue": "local", "procedure": "opt", "jobs": [{"geom": "He 0 0 0"}]},
        tmp_path,
    )

    assert manifest.program is Molpro
    assert manifest.charge == 0
    assert manifest.template.header == Molpro.DEFAULT_TEMPLATE
    assert manifest.config.chunk_size == CFG.queue_defaults.chunk_size
    assert manifest.config.job_limit == CFG.queue_defaults.job_limit
    assert manifest.config.sleep_int == CFG.queue_defaults.sleep_int
    assert manifest.config.dir == tmp_path


def test_manifest_templates_from_files(tmp_path):
    (tmp_path / "input.mop").write_text("PM7 charge={{.charge}}\n\n\n{{.geom}}\n")
    (tmp_path / "header.pbs").write_text("#!/bin/bash\n#PBS -N {{.basename}}\n")
    content = MANIFEST.replace("charge: 1\n", "charge: 1\ntemplate: input.mop\nscript_template: header.pbs\n")

    manifest = Manifest.fromFile(_write(tmp_path, content))

    assert manifest.template.header == "PM7 charge={{.charge}}\n\n\n{{.geom}}\n"
    assert manifest.config.template.header == "#!/bin/bash\n#PBS -N {{.basename}}\n"


def test_manifest_inline_template(tmp_path):
    manifest = Manifest.fromDict(
        {
            "program": "mopac",
            "queue": "pbs",
            "procedure": "freq",
            "template": "PM6\ntitle\n\n",
            "jobs": [{"geom": "He 0 0 0"}],
        },
        tmp_path,
    )

    assert manifest.template.header == "PM6\ntitle\n\n"


def test_manifest_relative_dir(tmp_path):
    (tmp_path / "work").mkdir()
    manifest = Manifest.fromFile(_write(tmp_path, MANIFEST + "dir: work\n"))

    assert manifest.config.dir == tmp_path.resolve() / "work"


@pytest.mark.parametrize(
    "content,message",
    [
        (MANIFEST + "walltime: 24h\n", "Unknown options in the manifest: walltime"),
        (MANIFEST.replace("program: mopac\n", ""), "Option 'program' is missing"),
        (MANIFEST.replace("procedure: single-point\n", ""), "Option 'procedure' is missing"),
        ("program: mopac\nqueue: pbs\nprocedure: opt\n", "Option 'jobs' is missing"),
        (MANIFEST.replace("program: mopac", "program: orca"), "No program registered as 'orca'"),
        (MANIFEST.replace("procedure: single-point", "procedure: md"), "Could not recognize a procedure"),
        (MANIFEST.replace("chunk_size: 2", "chunk_size: many"), "Invalid value in the manifest"),
        (MANIFEST.replace("chunk_size: 2", "chunk_size: 8"), "must not be lower than the chunk size"),
        (MANIFEST.replace("  - name: water\n", "  - name: job1\n"), "Duplicate job name 'job1'"),
        (MANIFEST.replace("  - name: water\n", "  - name: a/b\n"), "Invalid job name 'a/b'"),
        ("program: mopac\nqueue: pbs\nprocedure: opt\njobs: {}\n", "Option 'jobs' must be a list"),
        ("program: mopac\nqueue: pbs\nprocedure: opt\njobs:\n  - name: x\n", "must be a mapping with a 'geom' key"),
        ("program: mopac\nqueue: pbs\nprocedure: opt\njobs:\n  - geom: ''\n", "Geometry is empty"),
        ("- program\n- mopac\n", "must contain a mapping of options"),
        ("program: [mopac\n", "Could not parse the manifest"),
    ],
)
def test_manifest_invalid(tmp_path, content, message):
    with pytest.raises(QCQError, match=message):
        Manifest.fromFile(_write(tmp_path, content))


def test_manifest_missing_file(tmp_path):
    with pytest.raises(QCQError, match="does not exist"):
        Manifest.fromFile(tmp_path / "missing.yaml")


def test_manifest_build_jobs(tmp_path):
    manifest = Manifest.fromFile(_write(tmp_path, MANIFEST))

    jobs = manifest.buildJobs()

    assert [job.name() for job in jobs] == ["water", "job1"]
    assert all(job.state == JobState.PENDING for job in jobs)
    assert all(job.procedure == Procedure.SINGLE_PT for job in jobs)
    assert isinstance(jobs[0].program, Mopac)
    assert jobs[0].program.filename() == tmp_path.resolve() / "water"
    assert jobs[0].program.charge() == 1


def test_manifest_build_jobs_missing_dir(tmp_path):
    manifest = Manifest.fromFile(_write(tmp_path, MANIFEST + "dir: missing\n"))

    with pytest.raises(QCQError, match="Working directory .* does not exist"):
        manifest.buildJobs()


def test_manifest_build_backend(tmp_path):
    manifest = Manifest.fromFile(_write(tmp_path, MANIFEST))

    backend = manifest.buildBackend()

    assert isinstance(backend, PBS)
    assert backend.program() is Mopac
    assert backend.config() is manifest.config


def test_write_results(tmp_path):
    jobs = Manifest.fromFile(_write(tmp_path, MANIFEST)).buildJobs()
    jobs[0].job_id = "1.pbs"
    jobs[0].finish(JobResult(energy=-0.5, time=3.0))
    jobs[1].fail(JobError(JobErrorKind.FILE_NOT_FOUND, "job1.out"))
    results = tmp_path / "results.yaml"

    write_results(jobs, results)

    text = results.read_text()
    assert text.startswith("# qcq results\n")
    assert yaml.safe_load(text) == [
        {"name": "water", "state": "finished", "job_id": "1.pbs", "energy": -0.5, "time": 3.0},
        {"name": "job1", "state": "failed", "error": "File not found in 'job1.out'"},
    ]


def test_write_results_unwritable(tmp_path):
    with pytest.raises(QCQError, match="Cannot create or write to file"):
        write_results([], tmp_path / "missing" / "results.yaml")
