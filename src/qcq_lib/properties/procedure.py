# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Enumeration of the computations qcq can request from a program.
"""

from enum import Enum
from typing import Self

from qcq_lib.core.common import normalize
from qcq_lib.core.error import QCQError


class Procedure(Enum):
    """
    Kind of computation requested for a job.
    """

    OPT = 1
    SINGLE_PT = 2
    FREQ = 3

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        """
        Internal mapping from accepted (normalized) spellings to variant names.
        """
        return {
            "opt": "OPT",
            "optimization": "OPT",
            "optimisation": "OPT",
            "singlept": "SINGLE_PT",
            "singlepoint": "SINGLE_PT",
            "sp": "SINGLE_PT",
            "freq": "FREQ",
            "freqs": "FREQ",
            "frequency": "FREQ",
            "frequencies": "FREQ",
        }

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding Procedure enum variant.

        Matching ignores case, hyphens, and underscores, so that 'single-point',
        'SINGLE_PT', and 'sp' all select `SINGLE_PT`.

        Args:
            s (str): String representation of the procedure.

        Returns:
            Procedure variant.

        Raises:
            QCQError if the string corresponds to no Procedure.
        """
        try:
            return cls[cls._aliases()[normalize(s)]]
        except KeyError:
            raise QCQError(f"Could not recognize a procedure '{s}'.")

    def optimizes(self) -> bool:
        """Return True if the procedure relaxes the geometry before finishing."""
        return self in (Procedure.OPT, Procedure.FREQ)
