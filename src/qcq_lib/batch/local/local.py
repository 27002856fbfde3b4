# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shutil
from pathlib import Path

from qcq_lib.batch.interface import BatchInterface, BatchMeta, batch_system
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

logger = get_logger(__name__)


@batch_system
class Local(BatchInterface, metaclass=BatchMeta):
    """
    Implementation of BatchInterface running chunk scripts with a local shell.

    Submission blocks until the whole chunk has been computed, so the
    backend is synchronous and has no status to query.
    """

    @staticmethod
    def envName() -> str:
        return "Local"

    @staticmethod
    def isAvailable() -> bool:
        return shutil.which(CFG.local.submit_command) is not None

    @staticmethod
    def isSynchronous() -> bool:
        return True

    @staticmethod
    def scriptExtension() -> str:
        return CFG.suffixes.local_script.lstrip(".")

    def writeSubmitScript(self, input_stems: list[Path], script_path: Path) -> None:
        log = f"{self._stemReference(script_path)}{CFG.suffixes.script_log}"

        lines = list(self.program().localPreamble())
        for stem in input_stems:
            reference = self._stemReference(stem)
            input_file = self._inputReference(stem)
            lines.append(f"{self.program().invocation(input_file)} &>> {log}")
            lines.append(f"cat {input_file} {reference}{CFG.suffixes.output} >> {log}")
            lines.append(f'echo "{CFG.local.separator}" >> {log}')
        lines.append(f"date +%s >> {log}")

        logger.debug(f"Writing local script '{script_path}' for {len(input_stems)} jobs.")
        Local._writeScript(script_path, lines)

    def status(self) -> set[str]:
        raise QCQError("No status available for the local queue.")

    def _submitCommand(self, relative: bool) -> list[str]:
        return [CFG.local.submit_command]
