# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import os
from abc import ABCMeta
from typing import TypeVar

from qcq_lib.core.common import normalize
from qcq_lib.core.config import CFG
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

from .interface import BatchInterface

T = TypeVar("T", bound=type[BatchInterface])

logger = get_logger(__name__)


class BatchMeta(ABCMeta):
    """
    Metaclass for batch system classes.
    """

    # registry of supported batch systems, in the order of preference
    _registry: dict[str, type[BatchInterface]] = {}

    def __str__(cls: type[BatchInterface]):
        """
        Get the string representation of the batch system class.
        """
        return cls.envName()

    @classmethod
    def register(mcs, batch_cls: type[BatchInterface]) -> None:
        """
        Register a batch system class in the metaclass registry.

        Args:
            batch_cls: Subclass of BatchInterface to register.
        """
        mcs._registry[normalize(batch_cls.envName())] = batch_cls

    @classmethod
    def fromStr(mcs, name: str) -> type[BatchInterface]:
        """
        Return the batch system class registered with the given name (case-insensitive).

        Raises:
            QCQError: If no class is registered for the given name.
        """
        try:
            return mcs._registry[normalize(name)]
        except KeyError as e:
            raise QCQError(
                f"No batch system registered as '{name}'. Available batch systems: {', '.join(mcs.available())}."
            ) from e

    @classmethod
    def available(mcs) -> list[str]:
        """Return the names of all registered batch systems."""
        return [cls.envName() for cls in mcs._registry.values()]

    @classmethod
    def guess(mcs) -> type[BatchInterface]:
        """
        Select the first registered batch system that reports itself as available.

        Raises:
            QCQError: If no registered batch system is available.
        """
        for BatchSystem in mcs._registry.values():
            if BatchSystem.isAvailable():
                logger.debug(f"Guessed batch system: {str(BatchSystem)}.")
                return BatchSystem

        raise QCQError(
            "Could not guess a batch system. No registered batch system available."
        )

    @classmethod
    def fromEnvVarOrGuess(mcs) -> type[BatchInterface]:
        """
        Select a batch system named by the environment variable or by guessing.

        Raises:
            QCQError: If the environment variable names an unknown batch system,
                or if no available batch system can be guessed.
        """
        name = os.environ.get(CFG.env_vars.batch_system)
        if name:
            logger.debug(
                f"Using batch system name from an environment variable: {name}."
            )
            return BatchMeta.fromStr(name)

        return BatchMeta.guess()

    @classmethod
    def obtain(mcs, name: str | None) -> type[BatchInterface]:
        """
        Obtain a batch system class by name, environment variable, or guessing.

        Args:
            name (str | None): Optional name of the batch system. If `None`,
                `fromEnvVarOrGuess` is used.

        Raises:
            QCQError: If no suitable batch system can be found.
        """
        if name:
            return BatchMeta.fromStr(name)

        return BatchMeta.fromEnvVarOrGuess()


def batch_system(cls: T) -> T:
    """
    Class decorator registering a batch system in `BatchMeta`.
    """
    BatchMeta.register(cls)
    return cls
