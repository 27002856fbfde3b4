# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from collections.abc import Iterable
from pathlib import Path

from qcq_lib.core.common import get_scratch_files, yes_or_no_prompt
from qcq_lib.core.logger import get_logger

logger = get_logger(__name__)


class Clearer:
    """
    Handles detection and removal of files left behind by qcq in a directory.
    """

    def __init__(self, directory: Path):
        """
        Args:
            directory (Path): The directory to clear.
        """
        self._directory = directory

    def clear(self, force: bool = False) -> int:
        """
        Remove submission scripts, script logs, and program files from the directory.

        Args:
            force (bool): Do not ask for confirmation.

        Returns:
            int: Number of removed files.

        Raises:
            QCQError: If the directory does not exist.
        """
        files = get_scratch_files(self._directory)
        logger.debug(f"Files to clear: {files}.")
        if not files:
            logger.info("Nothing to clear.")
            return 0

        if not force and not yes_or_no_prompt(
            f"Remove {len(files)} file{'s' if len(files) > 1 else ''} from '{self._directory}'?"
        ):
            logger.info("Operation aborted.")
            return 0

        removed = Clearer._deleteFiles(files)
        logger.info(f"Removed {removed} file{'s' if removed != 1 else ''}.")
        return removed

    @staticmethod
    def _deleteFiles(files: Iterable[Path]) -> int:
        """
        Delete all specified files. Files that cannot be deleted are reported and skipped.

        Returns:
            int: Number of deleted files.
        """
        removed = 0
        for file in files:
            logger.debug(f"Removing file '{file}'.")
            try:
                file.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove '{file}': {e}.")

        return removed
