"""Core module for benchledger.

This module contains the exceptions and configuration used
throughout the library.
"""

from __future__ import annotations

from benchledger.core.config import Settings
from benchledger.core.exceptions import (
    BenchLedgerError,
    ConfigurationError,
    CorruptStoreError,
    ExtractionError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "BenchLedgerError",
    "ConfigurationError",
    "CorruptStoreError",
    "ExtractionError",
    "NotFoundError",
    "Settings",
    "ValidationError",
]
