"""Storage backends for the history artifact.

This module provides the storage protocol and implementations that
read and write the serialized history as a whole.

Example:
    >>> from benchledger.benchmarks.storage import FileStore
    >>> storage = FileStore("dev/bench/data.js")
    >>> text = storage.read()
"""

from __future__ import annotations

from benchledger.benchmarks.storage.base import StorageProtocol
from benchledger.benchmarks.storage.file_store import FileStore, MemoryStore

__all__ = [
    "FileStore",
    "MemoryStore",
    "StorageProtocol",
]
