# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from pathlib import Path

from qcq_lib.core.error import JobError, JobErrorKind, ScriptWriteError
from qcq_lib.core.logger import get_logger
from qcq_lib.properties.geom import Geom
from qcq_lib.properties.procedure import Procedure
from qcq_lib.properties.result import JobResult
from qcq_lib.properties.template import Template

logger = get_logger(__name__)


class ProgramInterface(ABC):
    """
    Abstract base class for quantum-chemistry program adapters.

    An adapter owns the files of a single job: it renders the input file from
    a template, knows how the program is invoked inside a submission script,
    parses the output into a `JobResult`, and lists the files to delete once
    the job is finished.

    `readOutput` raises `JobError`; writing the input raises `ScriptWriteError`.
    """

    # the program has to be submitted from the directory containing the script
    SUBMIT_FROM_SCRIPT_DIR = False

    # input template used when the batch does not provide one
    DEFAULT_TEMPLATE = ""

    def __init__(self, filename: str | Path, template: Template, charge: int, geom: Geom):
        """
        Args:
            filename (str | Path): Path to the job's files without an extension.
            template (Template): Template of the input file.
            charge (int): Molecular charge.
            geom (Geom): Molecular geometry.
        """
        self._filename = Path(filename)
        self._template = template
        self._charge = charge
        self._geom = geom

    @staticmethod
    def envName() -> str:
        """
        Return the name under which the program is registered.
        """
        raise NotImplementedError(
            "envName method is not implemented for this program implementation"
        )

    @classmethod
    @abstractmethod
    def extension(cls) -> str:
        """
        Return the extension of the program's input files (without the dot).
        """

    @abstractmethod
    def writeInput(self, procedure: Procedure) -> None:
        """
        Render the input file for the requested procedure.

        Raises:
            ScriptWriteError: If the input file cannot be written.
        """

    @abstractmethod
    def readOutput(self) -> JobResult:
        """
        Parse the output of a finished job.

        Raises:
            JobError: If the output is missing, reports an error, or contains no energy.
        """

    @abstractmethod
    def associatedFiles(self) -> list[Path]:
        """
        Return all files belonging to the job that may be deleted once it is finished.
        """

    @classmethod
    @abstractmethod
    def invocation(cls, input_file: str) -> str:
        """
        Return the shell command running the program on the given input file.
        """

    @classmethod
    @abstractmethod
    def defaultSubmitScript(cls) -> str:
        """
        Return the default header of PBS submission scripts for this program.

        The header may contain `{{.basename}}` and `{{.filename}}` placeholders.
        """

    @classmethod
    def scriptFooter(cls) -> list[str]:
        """
        Return lines appended to PBS submission scripts after all invocations.
        """
        return []

    @classmethod
    def localPreamble(cls) -> list[str]:
        """
        Return lines prepended to local submission scripts.
        """
        return []

    def filename(self) -> Path:
        """Return the path to the job's files without an extension."""
        return self._filename

    def name(self) -> str:
        """Return the base name of the job's files."""
        return self._filename.name

    def inputFile(self) -> Path:
        """Return the path to the input file."""
        return self._filename.with_name(f"{self._filename.name}.{self.extension()}")

    def outputFile(self) -> Path:
        """Return the path to the main output file."""
        return self._filename.with_name(f"{self._filename.name}.out")

    def template(self) -> Template:
        return self._template

    def charge(self) -> int:
        return self._charge

    def geom(self) -> Geom:
        return self._geom

    def _writeFile(self, body: str) -> None:
        """
        Write the rendered input into the input file.

        Raises:
            ScriptWriteError: If the file cannot be written.
        """
        file = self.inputFile()
        logger.debug(f"Writing input file '{file}'.")
        try:
            file.write_text(body)
        except OSError as e:
            raise ScriptWriteError(f"Failed to create input file '{file}': {e}.") from e

    def _readOutputText(self) -> str:
        """
        Read the main output file.

        Raises:
            JobError: If the output file does not exist or cannot be read.
        """
        file = self.outputFile()
        try:
            return file.read_text(errors="replace")
        except FileNotFoundError as e:
            raise JobError(JobErrorKind.FILE_NOT_FOUND, str(file)) from e
        except OSError as e:
            raise JobError(JobErrorKind.FILE_NOT_FOUND, str(file), str(e)) from e
