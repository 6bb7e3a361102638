"""Custom exceptions for benchledger.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from BenchLedgerError for easy catching.
"""

from __future__ import annotations


class BenchLedgerError(Exception):
    """Base exception for all benchledger errors.

    All custom exceptions in benchledger inherit from this class,
    making it easy to catch all library-specific errors.

    Example:
        >>> try:
        ...     store = load("dev/bench/data.js")
        ... except BenchLedgerError as e:
        ...     print(f"benchledger error: {e}")
    """


class ValidationError(BenchLedgerError):
    """Raised when an incoming measurement batch is malformed.

    The batch is rejected before any store mutation, so the caller can
    correct the input and retry.

    Example:
        >>> raise ValidationError("Duplicate benchmark name in batch: 'parse'")
    """


class ExtractionError(ValidationError):
    """Raised when harness output cannot be turned into benchmarks.

    Example:
        >>> raise ExtractionError("No benchmark result found in cargo output")
    """


class CorruptStoreError(BenchLedgerError):
    """Raised when the persisted history artifact cannot be read.

    This is fatal for the ingestion cycle: merging against an unreadable
    base would silently discard prior history.

    Example:
        >>> raise CorruptStoreError("Root identifier 'window.BENCHMARK_DATA' not found")
    """


class NotFoundError(BenchLedgerError):
    """Raised when querying a series that was never merged.

    Example:
        >>> raise NotFoundError("No history for 'Rust Benchmark'")
    """


class ConfigurationError(BenchLedgerError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("alert_threshold (0.01) must be >= threshold (0.02)")
    """
