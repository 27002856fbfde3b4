# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for qcq.

This module collects the foundational classes and helpers used across the
qcq codebase: configuration, the error taxonomy, structured logging, retries
of flaky external commands, per-item error handling, and CLI formatting.
"""
