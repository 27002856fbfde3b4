# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shutil
from pathlib import Path

from qcq_lib.batch.interface import BatchInterface, BatchMeta, batch_system
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger
from qcq_lib.core.retryer import Retryer

from .common import parseQstatTable

logger = get_logger(__name__)


@batch_system
class PBS(BatchInterface, metaclass=BatchMeta):
    """
    Implementation of BatchInterface for PBS Pro.
    """

    @staticmethod
    def envName() -> str:
        return "PBS"

    @staticmethod
    def isAvailable() -> bool:
        return shutil.which(CFG.pbs.submit_command) is not None

    @staticmethod
    def scriptExtension() -> str:
        return CFG.suffixes.pbs_script.lstrip(".")

    def writeSubmitScript(self, input_stems: list[Path], script_path: Path) -> None:
        lines = [self._renderHeader(script_path).rstrip("\n")]
        for stem in input_stems:
            lines.append(self.program().invocation(self._inputReference(stem)))
        lines.extend(self.program().scriptFooter())

        logger.debug(f"Writing PBS script '{script_path}' for {len(input_stems)} jobs.")
        PBS._writeScript(script_path, lines)

    def status(self) -> set[str]:
        command = PBS._translateStatus(self._config.user)
        logger.debug(" ".join(command))

        stdout = Retryer(
            PBS._runStatus,
            command,
            max_tries=CFG.status.retry_tries,
            wait_seconds=CFG.status.retry_wait,
            retry_on=(QCQError,),
        ).run()

        return parseQstatTable(stdout)

    def _submitCommand(self, relative: bool) -> list[str]:
        if relative:
            return [CFG.pbs.submit_command]
        return [CFG.pbs.submit_command, "-f"]

    @staticmethod
    def _translateStatus(user: str) -> list[str]:
        return [CFG.pbs.status_command, "-u", user]
