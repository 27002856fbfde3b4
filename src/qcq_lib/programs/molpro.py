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

# optg at the end of a line or followed by its options, but not optgrad
_OPTG = re.compile(r"(?im)optg(,|\}|\s*$)")
_OPTG_LINE = re.compile(r"(?i)^.*optg(,|\}|\s*$)")
_FREQ = re.compile(r"(?i)\{\s*freq")
_ENERGY_BANG = re.compile(r"(?i)^\s*!.*\benergy\s+(\S+)\s*$")
_ENERGY_SETTING = re.compile(r"(?i)^\s*SETTING\s+\w*ENERGY\w*\s*=\s*(\S+)")
_REAL_TIME = re.compile(r"(?i)REAL TIME\s*\*\s*(\S+)\s*SEC")
_CURRENT_GEOM = "Current geometry"


@program
class Molpro(ProgramInterface, metaclass=ProgramMeta):
    """
    Adapter for Molpro.

    The geometry block is left open in the template (see `DEFAULT_TEMPLATE`):
    `writeInput` closes it, for Z-matrices between the connectivity lines
    and the parameter values.

    Molpro jobs are submitted from the directory of the submission script.
    """

    SUBMIT_FROM_SCRIPT_DIR = True

    DEFAULT_TEMPLATE = """memory,1,g
gthresh,energy=1.d-12,zero=1.d-22,oneint=1.d-22,twoint=1.d-22;
gthresh,optgrad=1.d-8,optstep=1.d-8;
nocompress;

geometry={
{{.geom}}
basis={
default,cc-pVTZ-f12
}
set,charge={{.charge}}
set,spin=0
hf,accuracy=16,energy=1.0d-10
{CCSD(T)-F12,thrden=1.0d-8,thrvar=1.0d-10}
"""

    @staticmethod
    def envName() -> str:
        return "Molpro"

    @classmethod
    def extension(cls) -> str:
        return CFG.suffixes.molpro_input.lstrip(".")

    def writeInput(self, procedure: Procedure) -> None:
        body = self._template.header
        found_opt = _OPTG.search(body) is not None

        if procedure.optimizes():
            if not found_opt:
                body = _ensure_newline(body) + "{optg,grms=1.d-8,srms=1.d-8}\n"
        elif found_opt:
            body = "".join(
                f"{line}\n" for line in body.splitlines() if not _OPTG_LINE.match(line)
            )

        if procedure == Procedure.FREQ and not _FREQ.search(body):
            body = _ensure_newline(body) + "{frequencies}\n"

        body = body.replace("{{.geom}}", self._geomBlock())
        body = body.replace("{{.charge}}", str(self._charge))

        self._writeFile(body)

    def readOutput(self) -> JobResult:
        text = self._readOutputText()
        file = str(self.outputFile())
        lines = text.splitlines()

        for line in lines:
            if "ERROR" in line:
                raise JobError(JobErrorKind.ERROR_IN_OUTPUT, file, line.strip())

        raw_energy = None
        time = None
        for line in lines:
            if m := _ENERGY_BANG.match(line) or _ENERGY_SETTING.match(line):
                raw_energy = m.group(1)
            elif m := _REAL_TIME.search(line):
                time = _to_float(m.group(1))

        if raw_energy is None:
            raise JobError(JobErrorKind.ENERGY_NOT_FOUND, file)

        if (energy := _to_float(raw_energy)) is None:
            raise JobError(JobErrorKind.ENERGY_PARSE_ERROR, file, raw_energy)

        return JobResult(energy=energy, cart=Molpro._parseGeom(lines, file), time=time)

    def associatedFiles(self) -> list[Path]:
        return [self.inputFile(), self.outputFile()]

    @classmethod
    def invocation(cls, input_file: str) -> str:
        return f"{CFG.programs.molpro} -t ${{NCPUS:-1}} --no-xml-output {input_file}"

    @classmethod
    def defaultSubmitScript(cls) -> str:
        return """#!/bin/sh
#PBS -N {{.basename}}
#PBS -S /bin/bash
#PBS -j oe
#PBS -o {{.basename}}.out
#PBS -W umask=022
#PBS -l walltime=1000:00:00
#PBS -l ncpus=1
#PBS -l mem=8gb
#PBS -q workq

module load openpbs molpro

export WORKDIR=$PBS_O_WORKDIR
export TMPDIR=/tmp/$USER/$PBS_JOBID
cd $WORKDIR
mkdir -p $TMPDIR
"""

    @classmethod
    def scriptFooter(cls) -> list[str]:
        return ["rm -rf $TMPDIR"]

    def _geomBlock(self) -> str:
        """
        Return the geometry followed by the brace closing the geometry block.
        """
        if not self._geom.isZmat():
            return f"{self._geom}\n}}"

        connectivity, parameters = self._geom.zmatParts()
        if parameters:
            return f"{connectivity}\n}}\n{parameters}"
        return f"{connectivity}\n}}"

    @staticmethod
    def _parseGeom(lines: list[str], file: str) -> tuple[Atom, ...] | None:
        """
        Parse the last geometry printed by an optimization.

        The block looks like:

             Current geometry (xyz format, MOLPRO ANGSTROM), point   3

                3
             ENERGY=-76.36997248
             O          0.0000000000        0.0000000000       -0.0657441431
             ...

        Returns None if the output contains no such block.

        Raises:
            JobError: If the block is present but malformed.
        """
        starts = [i for i, line in enumerate(lines) if _CURRENT_GEOM in line]
        if not starts:
            return None

        rest = [line for line in lines[starts[-1] + 1 :] if line.strip()]
        try:
            natoms = int(rest[0].strip())
            atoms = [Atom.fromLine(line) for line in rest[2 : 2 + natoms]]
        except (IndexError, ValueError) as e:
            raise JobError(JobErrorKind.GEOM_NOT_FOUND, file) from e

        if len(atoms) != natoms or any(atom is None for atom in atoms):
            raise JobError(JobErrorKind.GEOM_NOT_FOUND, file)

        return tuple(atoms)  # ty: ignore[invalid-return-type]


def _ensure_newline(text: str) -> str:
    return text if not text or text.endswith("\n") else f"{text}\n"


def _to_float(value: str) -> float | None:
    """Convert a Fortran-style float (possibly using 'D' exponents) to float."""
    try:
        return float(value.replace("D", "E").replace("d", "e"))
    except ValueError:
        return None
