# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Properties and structured data of qcq batches.

This module collects the data representations underlying qcq's job model:
procedures, job states, geometries, templates, results, the jobs and chunks
tracked by the scheduler, and the configuration of a batch.
"""
