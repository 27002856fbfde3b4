# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
General utility functions for the qcq library.

This module provides helpers for YAML I/O, partitioning of job lists,
scanning working directories for scratch files, time formatting, user prompts,
and panel sizing.
"""

from collections.abc import Sequence
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import TypeVar

import readchar
import yaml
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .config import CFG
from .error import QCQError
from .logger import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the fastest available YAML dumper (CDumper if possible)."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CDumper.")
    except ImportError:
        from yaml import Dumper

        logger.debug("Loaded default YAML dumper.")
    return Dumper


@lru_cache(maxsize=1)
def load_yaml_loader() -> type[yaml.SafeLoader]:
    """Return the fastest available safe YAML loader (CSafeLoader if possible)."""
    try:
        from yaml import (
            CSafeLoader as SafeLoader,  # ty: ignore[possibly-missing-import]
        )

        logger.debug("Loaded YAML CLoader.")
    except ImportError:
        from yaml import SafeLoader

        logger.debug("Loaded default YAML loader.")

    return SafeLoader


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """
    Split a sequence into consecutive parts of at most `size` items.

    Every item ends up in exactly one part and the order of items is preserved.
    Only the last part may be shorter than `size`.

    Args:
        items (Sequence[T]): The items to split.
        size (int): Maximal number of items in one part.

    Returns:
        list[list[T]]: The parts.

    Raises:
        QCQError: If `size` is not positive.
    """
    if size < 1:
        raise QCQError(f"Size of a part must be positive, not {size}.")

    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def last_token(text: str, default: str) -> str:
    """
    Return the last whitespace-delimited token of the text that contains a digit.

    Acceptance lines such as 'your job 12345 submitted' thus yield '12345'.
    If no token contains a digit, the last token is returned.

    Args:
        text (str): Text to inspect, e.g., the standard output of a command.
        default (str): Value returned if the text contains no token.

    Returns:
        str: The selected token or `default`.
    """
    tokens = text.strip().split()
    if not tokens:
        return default

    for token in reversed(tokens):
        if any(c.isdigit() for c in token):
            return token
    return tokens[-1]


def get_files_with_suffix(directory: Path, suffix: str) -> list[Path]:
    """
    Retrieve all files in a directory that have the specified file suffix.

    Args:
        directory (Path): The directory to search in.
        suffix (str): The file suffix to match (including the dot, e.g., '.out').

    Returns:
        list[Path]: A list of Path objects representing files with the given suffix.
    """
    files = []
    for file in directory.iterdir():
        if file.is_file() and file.suffix == suffix:
            files.append(file)

    return files


def get_scratch_files(directory: Path) -> list[Path]:
    """
    Retrieve all files in a directory that qcq may have created.

    Args:
        directory (Path): The directory to search in.

    Returns:
        list[Path]: Sorted list of scripts, script logs, inputs, and outputs.

    Raises:
        QCQError: If the directory does not exist.
    """
    if not directory.is_dir():
        raise QCQError(f"Directory '{directory}' does not exist.")

    files = []
    for suffix in CFG.suffixes.scratch_suffixes:
        files.extend(get_files_with_suffix(directory, suffix))

    return sorted(files)


def yes_or_no_prompt(prompt: str) -> bool:
    """
    Display an interactive yes/no prompt to the user and return the selection.

    The prompt highlights the pressed key ('y' in green for yes, 'N' in red for no)
    and defaults to 'No' if the user presses any key other than 'y'.

    Args:
        prompt (str): The text to display as the question.

    Returns:
        bool: True if the user selects 'yes' (presses 'y'), False otherwise.
    """
    prompt = f"   {prompt} "
    text = (
        Text("PROMPT", style="magenta")
        + Text(prompt, style="default")
        + Text("[y/N]", style="bold default")
    )

    with Live(text, refresh_per_second=1) as live:
        key = readchar.readkey().lower()

        if key == "y":
            choice = (
                Text("[", style="bold default")
                + Text("y", style="bold green")
                + Text("/N]", style="bold default")
            )
        else:
            choice = (
                Text("[y/", style="bold default")
                + Text("N", style="bold red")
                + Text("]", style="bold default")
            )

        live.update(
            Text("PROMPT", style="magenta") + Text(prompt, style="default") + choice
        )

    return key == "y"


def format_duration(td: timedelta) -> str:
    """
    Convert a timedelta into a human-readable string showing only relevant units.

    Args:
        td (timedelta): The duration to format.

    Returns:
        str: A formatted string representing the duration, e.g., '1d 2h 3m 4s'.
    """
    total_seconds = int(td.total_seconds())

    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or total_seconds == 0:
        parts.append(f"{seconds}s")

    return " ".join(parts)


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Calculate the width of a panel relative to the console width, constrained by
    optional minimum and maximum width values.

    Args:
        console (Console): A rich Console-like object that provides terminal size.
        factor (int): A divisor used to scale down the terminal width.
        min_width (int | None): The minimum allowable panel width.
        max_width (int | None): The maximum allowable panel width.

    Returns:
        int: The computed panel width after applying scaling and bounds.
    """
    panel_width = console.size.width // factor
    if min_width is not None:
        panel_width = max(panel_width, min_width)
    if max_width is not None:
        panel_width = min(panel_width, max_width)

    return panel_width


def normalize(s: str) -> str:
    """
    Normalize a string for consistent comparison.

    The string is converted to lowercase and all hyphens, underscores,
    and spaces are removed.

    Args:
        s (str): The input string to normalize.

    Returns:
        str: The normalized string.
    """
    return s.lower().replace("-", "").replace("_", "").replace(" ", "")
