# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Background deletion of the files of finished jobs.
"""

import queue
import threading
from enum import Enum
from pathlib import Path
from typing import Self

from qcq_lib.core.config import CFG
from qcq_lib.core.error import CleanupError
from qcq_lib.core.logger import get_logger

logger = get_logger(__name__)


class DumpState(Enum):
    """Lifecycle of the cleanup worker."""

    RUNNING = 1
    STOPPING = 2
    STOPPED = 3

    def __str__(self) -> str:
        return self.name.lower()


# marks the end of the queued filenames
_END = object()


class Dump:
    """
    Deletes files on a background thread so that the scheduler never waits for the filesystem.

    Filenames are deleted in the order they were sent. Failures to delete
    a file are logged and do not stop the worker.

    The dump can be used as a context manager which drains it on exit.
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue(maxsize=CFG.dump.max_queued)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._state = DumpState.RUNNING

        self._thread = threading.Thread(
            target=self._work, name=CFG.dump.thread_name, daemon=True
        )
        self._thread.start()

    def send(self, filename: str | Path) -> None:
        """
        Queue a file for deletion.

        Files sent after `shutdown` has been called are ignored.
        """
        with self._lock:
            if self._state != DumpState.RUNNING:
                logger.debug(f"Dump is {self._state}, not deleting '{filename}'.")
                return
            self._queue.put(Path(filename))

    def shutdown(self, drain: bool = True) -> None:
        """
        Stop accepting files and wait for the worker to exit.

        Args:
            drain (bool): Delete all files sent so far before exiting. If False,
                the worker exits before its next deletion and the remaining
                files are kept.

        Calling `shutdown` more than once has no effect.
        """
        with self._lock:
            if self._state != DumpState.RUNNING:
                return
            self._state = DumpState.STOPPING

        if not drain:
            self._stop.set()
        self._queue.put(_END)
        self._thread.join()

        self._state = DumpState.STOPPED
        logger.debug("Dump stopped.")

    def state(self) -> DumpState:
        return self._state

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is _END or self._stop.is_set():
                return
            Dump._delete(item)

    @staticmethod
    def _delete(file: Path) -> None:
        try:
            file.unlink()
            logger.debug(f"Deleted '{file}'.")
        except OSError as e:
            logger.warning(CleanupError(f"Could not delete '{file}': {e}."))
