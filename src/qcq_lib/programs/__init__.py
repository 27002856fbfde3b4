# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Adapters for the quantum-chemistry programs supported by qcq.

- `ProgramInterface`: the abstract interface every program adapter
  implements. An adapter writes the input file of one job, knows the shell
  command running the program, parses the output into a `JobResult` and
  lists the files belonging to the job.

- `ProgramMeta`: a metaclass registering the adapters by name. The
  `@program` decorator registers implementations automatically.

- `Mopac` and `Molpro`: the concrete adapters.
"""

from .interface import ProgramInterface
from .meta import ProgramMeta, program
from .molpro import Molpro
from .mopac import Mopac

__all__ = [
    "Molpro",
    "Mopac",
    "ProgramInterface",
    "ProgramMeta",
    "program",
]
