"""Benchmark history module for benchledger.

This module provides tools for validating harness results into runs,
merging them into the append-only history, and reading and writing the
history artifact consumed by the dashboard.

Example:
    >>> from benchledger.benchmarks import BenchmarkHistory, build_run, extract_benchmarks
    >>> from benchledger.regression import RegressionThresholds
    >>>
    >>> run = build_run("cargo", commit, extract_benchmarks("cargo", output))
    >>> history = BenchmarkHistory(
    ...     "dev/bench/data.js",
    ...     thresholds=RegressionThresholds(threshold=0.02, alert_threshold=0.05),
    ... )
    >>> result = history.ingest(run, suite="Rust Benchmark")
"""

from __future__ import annotations

from benchledger.benchmarks.entry import MonotonicClock, RawBenchmark, build_run
from benchledger.benchmarks.extract import EXTRACTORS, extract_benchmarks
from benchledger.benchmarks.history import (
    BenchmarkHistory,
    IngestResult,
    has_commit,
    load,
    merge,
    series,
)
from benchledger.benchmarks.models import Benchmark, BenchmarkStore, Commit, GitUser, Run
from benchledger.benchmarks.serializer import DEFAULT_GLOBAL_NAME, decode, encode
from benchledger.benchmarks.storage import FileStore, MemoryStore, StorageProtocol

__all__ = [
    "DEFAULT_GLOBAL_NAME",
    "EXTRACTORS",
    "Benchmark",
    "BenchmarkHistory",
    "BenchmarkStore",
    "Commit",
    "FileStore",
    "GitUser",
    "IngestResult",
    "MemoryStore",
    "MonotonicClock",
    "RawBenchmark",
    "Run",
    "StorageProtocol",
    "build_run",
    "decode",
    "encode",
    "extract_benchmarks",
    "has_commit",
    "load",
    "merge",
    "series",
]
