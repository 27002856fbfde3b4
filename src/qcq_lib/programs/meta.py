# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABCMeta
from typing import TypeVar

from qcq_lib.core.common import normalize
from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

from .interface import ProgramInterface

T = TypeVar("T", bound=type[ProgramInterface])

logger = get_logger(__name__)


class ProgramMeta(ABCMeta):
    """
    Metaclass for program adapter classes.
    """

    # registry of supported programs
    _registry: dict[str, type[ProgramInterface]] = {}

    def __str__(cls: type[ProgramInterface]):
        """
        Get the string representation of the program class.
        """
        return cls.envName()

    @classmethod
    def register(mcs, program_cls: type[ProgramInterface]) -> None:
        """
        Register a program class in the metaclass registry.

        Args:
            program_cls: Subclass of ProgramInterface to register.
        """
        mcs._registry[normalize(program_cls.envName())] = program_cls

    @classmethod
    def fromStr(mcs, name: str) -> type[ProgramInterface]:
        """
        Return the program class registered with the given name (case-insensitive).

        Raises:
            QCQError: If no class is registered for the given name.
        """
        try:
            return mcs._registry[normalize(name)]
        except KeyError as e:
            raise QCQError(
                f"No program registered as '{name}'. Available programs: {', '.join(mcs.available())}."
            ) from e

    @classmethod
    def available(mcs) -> list[str]:
        """Return the names of all registered programs."""
        return [cls.envName() for cls in mcs._registry.values()]


def program(cls: T) -> T:
    """
    Class decorator registering a program adapter in `ProgramMeta`.
    """
    ProgramMeta.register(cls)
    return cls
