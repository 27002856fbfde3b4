# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from pathlib import Path

from qcq_lib.core.config import CFG
from qcq_lib.core.error import JobError, JobErrorKind
from qcq_lib.core.logger import get_logger
from qcq_lib.properties.geom import Atom
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.result import JobResult

from .interface import ProgramInterface
from .meta import ProgramMeta, program

logger = get_logger(__name__)

_HEAT = re.compile(r"FINAL\s+HEAT\s+OF\s+FORMATION\s*=\s*(\S+)\s*KCAL/MOL")
_JOB_TIME = re.compile(r"TOTAL\s+JOB\s+TIME:\s*(\S+)\s*SECONDS")
_ERROR = re.compile(r"\bERROR\b")
_CARTESIAN = "CARTESIAN COORDINATES"

# keywords controlled by the procedure
_SINGLE_PT = "1SCF"
_FORCE = "FORCE"


@program
class Mopac(ProgramInterface, metaclass=ProgramMeta):
    """
    Adapter for MOPAC.

    The first line of the template holds the MOPAC keywords. The keywords
    selecting the procedure (`1SCF`, `FORCE`) are managed by `writeInput`
    and should not be part of the template.
    """

    DEFAULT_TEMPLATE = """scfcrt=1.D-21 aux(precision=14) PM6 charge={{.charge}}
Generated by qcq

{{.geom}}
"""

    @staticmethod
    def envName() -> str:
        return "MOPAC"

    @classmethod
    def extension(cls) -> str:
        return CFG.suffixes.mopac_input.lstrip(".")

    def writeInput(self, procedure: Procedure) -> None:
        lines = self._template.header.splitlines()
        if not lines:
            lines = [""]

        lines[0] = Mopac._keywords(lines[0], procedure)
        body = "\n".join(lines) + "\n"

        if "{{.geom}}" in body:
            body = body.replace("{{.geom}}", str(self._geom))
        else:
            body += f"{self._geom}\n"
        body = body.replace("{{.charge}}", str(self._charge))

        self._writeFile(body)

    def readOutput(self) -> JobResult:
        text = self._readOutputText()
        file = str(self.outputFile())
        lines = text.splitlines()

        for line in lines:
            if _ERROR.search(line):
                raise JobError(JobErrorKind.ERROR_IN_OUTPUT, file, line.strip())

        raw_heat = None
        time = None
        for line in lines:
            if m := _HEAT.search(line):
                raw_heat = m.group(1)
            elif m := _JOB_TIME.search(line):
                try:
                    time = float(m.group(1))
                except ValueError:
                    logger.debug(f"Ignoring unreadable job time '{m.group(1)}' in '{file}'.")

        if raw_heat is None:
            raise JobError(JobErrorKind.ENERGY_NOT_FOUND, file)

        try:
            energy = float(raw_heat) / CFG.programs.kcal_per_hartree
        except ValueError as e:
            raise JobError(JobErrorKind.ENERGY_PARSE_ERROR, file, raw_heat) from e

        return JobResult(energy=energy, cart=Mopac._parseGeom(lines), time=time)

    def associatedFiles(self) -> list[Path]:
        return [
            self._filename.with_name(f"{self._filename.name}{suffix}")
            for suffix in [
                CFG.suffixes.mopac_input,
                CFG.suffixes.output,
                *CFG.suffixes.mopac_extra,
            ]
        ]

    @classmethod
    def invocation(cls, input_file: str) -> str:
        return f"{CFG.programs.mopac} {input_file}"

    @classmethod
    def defaultSubmitScript(cls) -> str:
        return """#!/bin/sh
#PBS -N {{.basename}}
#PBS -S /bin/bash
#PBS -j oe
#PBS -o {{.filename}}.out
#PBS -W umask=022
#PBS -l walltime=1000:00:00
#PBS -l ncpus=1
#PBS -l mem=1gb
#PBS -q workq

module load openpbs

export WORKDIR=$PBS_O_WORKDIR
cd $WORKDIR
"""

    @classmethod
    def localPreamble(cls) -> list[str]:
        if CFG.programs.mopac_ld_library_path:
            return [f"export LD_LIBRARY_PATH={CFG.programs.mopac_ld_library_path}"]
        return []

    @staticmethod
    def _keywords(line: str, procedure: Procedure) -> str:
        """
        Adjust the keyword line of the template for the requested procedure.
        """
        managed = {_SINGLE_PT, _FORCE}
        keywords = [kw for kw in line.split() if kw.upper() not in managed]

        match procedure:
            case Procedure.SINGLE_PT:
                keywords.append(_SINGLE_PT)
            case Procedure.FREQ:
                keywords.append(_FORCE)
            case Procedure.OPT:
                pass

        return " ".join(keywords)

    @staticmethod
    def _parseGeom(lines: list[str]) -> tuple[Atom, ...] | None:
        """
        Parse the last block of Cartesian coordinates printed by MOPAC.

        The block looks like:

                                     CARTESIAN COORDINATES

               1    O          0.0000    0.0000    0.0000
               2    H          0.9584    0.0000    0.0000

        Returns None if the output contains no such block.
        """
        starts = [i for i, line in enumerate(lines) if line.strip() == _CARTESIAN]
        if not starts:
            return None

        atoms = []
        for line in lines[starts[-1] + 1 :]:
            if not line.strip():
                if atoms:
                    break
                continue

            fields = line.split()
            # skip the atom index
            if (atom := Atom.fromLine(" ".join(fields[1:]))) is None:
                break
            atoms.append(atom)

        return tuple(atoms) or None
