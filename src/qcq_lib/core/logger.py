# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return a logger with unified formatting.

    Records are written to stderr using rich's RichHandler with colored levels.
    Calling this function repeatedly for the same name does not stack handlers.
    Time is always shown in debug mode; the name of the emitting thread is
    shown in debug mode for records not coming from the main thread.
    """
    logger = logging.getLogger(name)

    debug_mode = os.environ.get(CFG.env_vars.debug_mode) is not None
    level = logging.DEBUG if debug_mode else logging.INFO
    logger.setLevel(level)

    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
            return logger

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_level=True,
        show_time=show_time or debug_mode,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    if debug_mode:
        handler.addFilter(_ThreadNameFilter())

    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


class _ThreadNameFilter(logging.Filter):
    """Prefix records emitted outside of the main thread with the thread name."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.threadName and record.threadName != "MainThread":
            record.msg = f"[{record.threadName}] {record.msg}"
        return True
