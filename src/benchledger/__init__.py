"""benchledger: Append-only benchmark history with regression detection."""

from __future__ import annotations

from benchledger.benchmarks import (
    Benchmark,
    BenchmarkHistory,
    BenchmarkStore,
    Commit,
    GitUser,
    Run,
    build_run,
    decode,
    encode,
    extract_benchmarks,
    load,
    merge,
    series,
)
from benchledger.core.exceptions import (
    BenchLedgerError,
    ConfigurationError,
    CorruptStoreError,
    ExtractionError,
    NotFoundError,
    ValidationError,
)
from benchledger.regression import (
    Classification,
    Comparator,
    RegressionAlert,
    RegressionDetector,
    RegressionResult,
    RegressionThresholds,
)

__version__ = "0.3.0"
__all__ = [
    # Models
    "Benchmark",
    "BenchmarkStore",
    "Commit",
    "GitUser",
    "Run",
    # History
    "BenchmarkHistory",
    "build_run",
    "extract_benchmarks",
    "load",
    "merge",
    "series",
    # Serialization
    "decode",
    "encode",
    # Regression detection
    "Classification",
    "Comparator",
    "RegressionAlert",
    "RegressionDetector",
    "RegressionResult",
    "RegressionThresholds",
    # Errors
    "BenchLedgerError",
    "ConfigurationError",
    "CorruptStoreError",
    "ExtractionError",
    "NotFoundError",
    "ValidationError",
    # Version
    "__version__",
]
