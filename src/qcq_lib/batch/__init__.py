# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Executors of chunk scripts.

Backends are registered in `BatchMeta` in the order of preference used
when guessing: PBS first, the local shell as the fallback.
"""

from .interface import BatchInterface, BatchMeta
from .pbs import PBS
from .local import Local

__all__ = [
    "BatchInterface",
    "BatchMeta",
    "Local",
    "PBS",
]
