# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Loading of batch descriptions from YAML manifests.

Example manifest:

    program: mopac
    queue: pbs
    procedure: opt
    charge: 0
    template: template.mop
    chunk_size: 64
    jobs:
      - name: water
        geom: |
          O 0.000 0.000 0.000
          H 0.758 0.000 0.504
          H -0.758 0.000 0.504

Relative paths in the manifest are resolved against the directory of the manifest.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Self

import yaml

from qcq_lib.batch import BatchInterface, BatchMeta
from qcq_lib.core.common import load_yaml_dumper, load_yaml_loader
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger
from qcq_lib.programs import ProgramInterface, ProgramMeta
from qcq_lib.properties.geom import Geom
from qcq_lib.properties.job import Job
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.queue_config import QueueConfig
from qcq_lib.properties.template import Template

logger = get_logger(__name__)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()
Dumper: type[yaml.Dumper] = load_yaml_dumper()

_KNOWN_KEYS = {
    "program",
    "queue",
    "template",
    "charge",
    "procedure",
    "chunk_size",
    "job_limit",
    "sleep_int",
    "dir",
    "no_del",
    "script_template",
    "jobs",
}


@dataclass(frozen=True)
class JobEntry:
    """A named geometry listed in a manifest."""

    name: str
    geom: Geom


@dataclass(frozen=True)
class Manifest:
    """
    Description of one batch of jobs.

    Attributes:
        program (type[ProgramInterface]): Program running the jobs.
        batch_system (type[BatchInterface]): Backend executing the chunk scripts.
        procedure (Procedure): Computation requested for every job.
        charge (int): Molecular charge shared by all jobs.
        template (Template): Template of the input files.
        config (QueueConfig): Configuration of the batch.
        entries (tuple[JobEntry, ...]): Names and geometries of the jobs.
    """

    program: type[ProgramInterface]
    batch_system: type[BatchInterface]
    procedure: Procedure
    charge: int
    template: Template
    config: QueueConfig
    entries: tuple[JobEntry, ...]

    @classmethod
    def fromFile(cls, file: Path, **overrides: Any) -> Self:
        """
        Load a manifest from a YAML file.

        Args:
            file (Path): Path to the manifest.
            **overrides: Values replacing the ones from the file. None values are ignored.

        Raises:
            QCQError: If the file does not exist, cannot be parsed, or is invalid.
        """
        logger.debug(f"Loading manifest from '{file}'.")

        if not file.is_file():
            raise QCQError(f"Manifest '{file}' does not exist.")

        try:
            with file.open("r") as input:
                data = yaml.load(input, Loader=SafeLoader)
        except yaml.YAMLError as e:
            raise QCQError(f"Could not parse the manifest '{file}': {e}.") from e
        except OSError as e:
            raise QCQError(f"Could not read the manifest '{file}': {e}.") from e

        if not isinstance(data, dict):
            raise QCQError(f"Manifest '{file}' must contain a mapping of options.")

        return cls.fromDict(data, file.parent.resolve(), **overrides)

    @classmethod
    def fromDict(cls, data: dict[str, Any], base_dir: Path, **overrides: Any) -> Self:
        """
        Build a manifest from parsed YAML data.

        Args:
            data (dict[str, Any]): Options of the manifest.
            base_dir (Path): Directory against which relative paths are resolved.
            **overrides: Values replacing the ones from `data`. None values are ignored.

        Raises:
            QCQError: If mandatory options are missing or any option is invalid.
        """
        if unknown := sorted(set(data) - _KNOWN_KEYS):
            raise QCQError(f"Unknown options in the manifest: {', '.join(unknown)}.")

        data = data | {k: v for k, v in overrides.items() if v is not None}

        for key in ("program", "procedure", "jobs"):
            if data.get(key) is None:
                raise QCQError(f"Option '{key}' is missing in the manifest.")

        program = ProgramMeta.fromStr(str(data["program"]))
        batch_system = BatchMeta.obtain(data.get("queue"))

        if (raw_template := data.get("template")) is not None:
            template = Template.fromFileOrStr(str(raw_template), base_dir)
        else:
            template = Template(program.DEFAULT_TEMPLATE)

        script_template = None
        if (raw_script := data.get("script_template")) is not None:
            script_template = Template.fromFileOrStr(str(raw_script), base_dir)

        directory = Path(str(data.get("dir", CFG.queue_defaults.dir)))
        if not directory.is_absolute():
            directory = base_dir / directory

        try:
            config = QueueConfig(
                chunk_size=int(data.get("chunk_size", CFG.queue_defaults.chunk_size)),
                job_limit=int(data.get("job_limit", CFG.queue_defaults.job_limit)),
                sleep_int=float(data.get("sleep_int", CFG.queue_defaults.sleep_int)),
                dir=directory,
                no_del=bool(data.get("no_del", False)),
                template=script_template,
            )
            charge = int(data.get("charge", 0))
        except (TypeError, ValueError) as e:
            raise QCQError(f"Invalid value in the manifest: {e}.") from e

        return cls(
            program=program,
            batch_system=batch_system,
            procedure=Procedure.fromStr(str(data["procedure"])),
            charge=charge,
            template=template,
            config=config,
            entries=Manifest._parseEntries(data["jobs"]),
        )

    def buildBackend(self) -> BatchInterface:
        """Return the backend running this batch."""
        return self.batch_system(self.program, self.config)

    def buildJobs(self) -> list[Job]:
        """
        Return a pending job for every entry of the manifest.

        Raises:
            QCQError: If the working directory does not exist.
        """
        if not self.config.dir.is_dir():
            raise QCQError(f"Working directory '{self.config.dir}' does not exist.")

        return [
            Job(
                program=self.program(
                    self.config.dir / entry.name, self.template, self.charge, entry.geom
                ),
                procedure=self.procedure,
            )
            for entry in self.entries
        ]

    @staticmethod
    def _parseEntries(raw: Any) -> tuple[JobEntry, ...]:
        """
        Parse the list of jobs. Unnamed jobs are called `job<index>`.

        Raises:
            QCQError: If the list is malformed or contains duplicate names.
        """
        if not isinstance(raw, list):
            raise QCQError("Option 'jobs' must be a list.")

        entries = []
        seen: set[str] = set()
        for i, item in enumerate(raw):
            if not isinstance(item, dict) or "geom" not in item:
                raise QCQError(f"Job number {i} must be a mapping with a 'geom' key.")

            name = str(item.get("name", f"job{i}"))
            if not name or "/" in name:
                raise QCQError(f"Invalid job name '{name}'.")
            if name in seen:
                raise QCQError(f"Duplicate job name '{name}'.")
            seen.add(name)

            entries.append(JobEntry(name, Geom.fromStr(str(item["geom"]))))

        return tuple(entries)


def write_results(jobs: list[Job], file: Path) -> None:
    """
    Write the outcome of all jobs into a YAML file.

    Raises:
        QCQError: If the file cannot be written.
    """
    logger.debug(f"Writing results of {len(jobs)} jobs into '{file}'.")
    try:
        with file.open("w") as output:
            output.write("# qcq results\n")
            yaml.dump(
                [job.toDict() for job in jobs],
                output,
                default_flow_style=False,
                sort_keys=False,
                Dumper=Dumper,
            )
    except OSError as e:
        raise QCQError(f"Cannot create or write to file '{file}': {e}.") from e
