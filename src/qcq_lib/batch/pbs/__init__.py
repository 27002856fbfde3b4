# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
PBS backend for qcq: chunk scripts submitted with `qsub`, active jobs
queried with `qstat -u`.
"""

from .common import parseQstatTable
from .pbs import PBS

__all__ = [
    "PBS",
    "parseQstatTable",
]
