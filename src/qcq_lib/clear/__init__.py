# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Utilities for removing files left behind by qcq.

This module provides the `Clearer` class, which finds submission scripts,
script logs, and program inputs and outputs in a directory and deletes them
after confirmation.
"""

from .clearer import Clearer

__all__ = [
    "Clearer",
]
