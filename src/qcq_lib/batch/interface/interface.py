# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from qcq_lib.core.common import last_token
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError, ScriptWriteError, SubmissionError
from qcq_lib.core.logger import get_logger
from qcq_lib.core.retryer import Retryer
from qcq_lib.programs import ProgramInterface
from qcq_lib.properties.queue_config import QueueConfig
from qcq_lib.properties.template import Template

logger = get_logger(__name__)


class BatchInterface(ABC):
    """
    Abstract base class for executors of chunk scripts.

    A batch backend writes the script running a chunk of jobs, submits it,
    and reports which of the submitted scripts are still active.
    Backends are bound to the program whose jobs they run and to the
    configuration of the batch.
    """

    def __init__(self, program: type[ProgramInterface] | None, config: QueueConfig):
        """
        Args:
            program (type[ProgramInterface] | None): Program run by the submitted scripts.
                May be None if the backend is only used to query the status.
            config (QueueConfig): Configuration of the batch.
        """
        self._program = program
        self._config = config

    @staticmethod
    def envName() -> str:
        """
        Return the name of the batch system environment.

        Returns:
            str: The batch system name.
        """
        raise NotImplementedError(
            "envName method is not implemented for this batch system implementation"
        )

    @staticmethod
    def isAvailable() -> bool:
        """
        Determine whether the batch system can be used on the current host.

        Returns:
            bool: True if the batch system is available, False otherwise.
        """
        raise NotImplementedError(
            "isAvailable method is not implemented for this batch system implementation"
        )

    @staticmethod
    def isSynchronous() -> bool:
        """
        Return True if a submitted script has already finished once `submit` returns.

        The status of synchronous backends is never polled.
        """
        return False

    @staticmethod
    def scriptExtension() -> str:
        """
        Return the extension of the submission scripts (without the dot).
        """
        raise NotImplementedError(
            "scriptExtension method is not implemented for this batch system implementation"
        )

    @abstractmethod
    def writeSubmitScript(self, input_stems: list[Path], script_path: Path) -> None:
        """
        Write a script running the program on every input of the chunk.

        Args:
            input_stems (list[Path]): Paths to the inputs of the chunk without extensions.
            script_path (Path): Path of the script to write.

        Raises:
            ScriptWriteError: If the script cannot be written.
        """

    @abstractmethod
    def status(self) -> set[str]:
        """
        Return the IDs of all active jobs of the user.

        Raises:
            StatusParseError: If the output of the status command cannot be parsed.
            QCQError: If the status command repeatedly fails.
        """

    def submit(self, script_path: Path) -> str:
        """
        Submit the script to the batch system.

        A rejected submission is attempted again after a pause.

        Args:
            script_path (Path): Path to the submission script.

        Returns:
            str: The job ID printed by the submission command or `CFG.submitter.no_job_id`.

        Raises:
            SubmissionError: If the submission command cannot be started
                or if all submission attempts fail.
        """
        command, cwd = self._translateSubmit(script_path)
        logger.debug(f"Submitting '{script_path}': {' '.join(command)}.")

        wait = CFG.submitter.retry_wait
        if wait is None:
            wait = self._config.sleep_int

        try:
            stdout = Retryer(
                BatchInterface._runSubmit,
                command,
                cwd,
                max_tries=CFG.submitter.retry_tries,
                wait_seconds=wait,
                retry_on=(SubmissionError,),
            ).run()
        except OSError as e:
            raise SubmissionError(
                f"Could not run the submission command '{command[0]}': {e}."
            ) from e

        job_id = last_token(stdout, CFG.submitter.no_job_id)
        logger.debug(f"Script '{script_path}' submitted as '{job_id}'.")
        return job_id

    def program(self) -> type[ProgramInterface]:
        """
        Return the program run by the submitted scripts.

        Raises:
            QCQError: If the backend was created without a program.
        """
        if self._program is None:
            raise QCQError(f"No program associated with the {self.envName()} backend.")
        return self._program

    def config(self) -> QueueConfig:
        return self._config

    def _translateSubmit(self, script_path: Path) -> tuple[list[str], Path | None]:
        """
        Return the submission command and the directory it is run from.

        Programs submitted from the directory of the script receive only the
        name of the script.
        """
        if self.program().SUBMIT_FROM_SCRIPT_DIR:
            return [*self._submitCommand(relative=True), script_path.name], script_path.parent
        return [*self._submitCommand(relative=False), str(script_path)], None

    @abstractmethod
    def _submitCommand(self, relative: bool) -> list[str]:
        """
        Return the submission command without the script argument.

        Args:
            relative (bool): Whether the script is given relative to the working directory.
        """

    def _inputReference(self, stem: Path) -> str:
        """
        Return the path under which the submission script refers to the input file of a job.
        """
        return f"{self._stemReference(stem)}.{self.program().extension()}"

    def _stemReference(self, stem: Path) -> str:
        """
        Return the path under which the submission script refers to the files of a job.
        """
        return stem.name if self.program().SUBMIT_FROM_SCRIPT_DIR else str(stem)

    def _renderHeader(self, script_path: Path) -> str:
        """
        Render the script header from the custom template or the program's default.
        """
        template = self._config.template or Template(self.program().defaultSubmitScript())
        return template.render(basename=script_path.name, filename=str(script_path))

    @staticmethod
    def _writeScript(script_path: Path, lines: list[str]) -> None:
        """
        Write the lines into the script.

        Raises:
            ScriptWriteError: If the script cannot be written.
        """
        try:
            script_path.write_text("\n".join(lines) + "\n")
        except OSError as e:
            raise ScriptWriteError(
                f"Failed to create submission script '{script_path}': {e}."
            ) from e

    @staticmethod
    def _runSubmit(command: list[str], cwd: Path | None) -> str:
        """
        Run the submission command once.

        Returns:
            str: Standard output of the command.

        Raises:
            SubmissionError: If the command exits with a non-zero code.
            OSError: If the command cannot be started.
        """
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            errors="replace",
        )

        if result.returncode != 0:
            raise SubmissionError(
                f"Submission command '{' '.join(command)}' failed with exit code {result.returncode}.\n"
                f"stdout: {result.stdout.strip()}\n"
                f"stderr: {result.stderr.strip()}"
            )

        return result.stdout

    @staticmethod
    def _runStatus(command: list[str]) -> str:
        """
        Run the status command once.

        Returns:
            str: Standard output of the command.

        Raises:
            QCQError: If the command cannot be started or exits with a non-zero code.
        """
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                errors="replace",
            )
        except OSError as e:
            raise QCQError(f"Could not run the status command '{command[0]}': {e}.") from e

        if result.returncode != 0:
            raise QCQError(
                f"Status command '{' '.join(command)}' failed with exit code {result.returncode}: {result.stderr.strip()}."
            )

        return result.stdout
