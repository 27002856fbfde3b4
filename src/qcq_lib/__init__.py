# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the qcq command-line tool.

This package provides the internal logic behind qcq's batch workflow. It
defines the program adapters (MOPAC, Molpro), the batch backends (PBS and
the local shell), the chunk scheduler with its background cleanup worker,
and the helpers shared by all qcq commands.
"""

from .qcq import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "batch",
    "clear",
    "core",
    "drain",
    "programs",
    "properties",
    "status",
]
