# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Running batches of jobs to completion.

This module provides the `ChunkScheduler`, which partitions jobs into
chunks, submits them while respecting the job limit, polls the batch system
and collects results; the `Dump`, which deletes the files of finished jobs on
a background thread; the `Manifest`, which loads a batch from YAML; and the
`ResultsPresenter`, which summarizes the outcome.
"""

from .dump import Dump, DumpState
from .manifest import Manifest, write_results
from .presenter import ResultsPresenter
from .scheduler import ChunkScheduler

__all__ = [
    "ChunkScheduler",
    "Dump",
    "DumpState",
    "Manifest",
    "ResultsPresenter",
    "write_results",
]
