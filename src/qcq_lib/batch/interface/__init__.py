# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Abstractions for running chunk scripts on different executors.

- `BatchInterface`: the abstract interface every backend implements. It
  writes the script of a chunk, submits it (with bounded retries), and
  reports the IDs of active jobs.

- `BatchMeta`: a metaclass that registers the backends and selects one by
  name, from an environment variable, or by probing availability. The
  `@batch_system` decorator registers implementations automatically.
"""

from .interface import BatchInterface
from .meta import BatchMeta, batch_system

__all__ = [
    "BatchInterface",
    "BatchMeta",
    "batch_system",
]
