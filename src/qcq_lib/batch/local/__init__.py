# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Local backend for qcq: chunk scripts run synchronously with `bash`.
"""

from .local import Local

__all__ = [
    "Local",
]
