"""File storage for the history artifact.

This module provides a file-based storage backend with atomic writes,
and an in-memory backend for tests and dry runs.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStore:
    """File storage for the history artifact.

    Uses atomic writes (temp file + rename) so that a failed write
    leaves the previous artifact untouched.

    Example:
        >>> storage = FileStore("dev/bench/data.js")
        >>> storage.write('window.BENCHMARK_DATA = {...}')
        >>> text = storage.read()
    """

    def __init__(self, path: str | Path = "dev/bench/data.js", encoding: str = "utf-8") -> None:
        """Initialize the file store.

        Args:
            path: Path to the artifact.
            encoding: Text encoding of the artifact.
        """
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        """Path to the artifact."""
        return self._path

    def read(self) -> str | None:
        """Read the artifact.

        Returns:
            The artifact text, or None if the file does not exist.
        """
        if not self._path.exists():
            logger.info(f"No history at {self._path}, starting fresh")
            return None
        return self._path.read_text(encoding=self._encoding)

    def write(self, text: str) -> None:
        """Write the artifact with an atomic rename.

        Args:
            text: The complete artifact text.
        """
        # Ensure parent directory exists
        self._path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(temp_fd, "w", encoding=self._encoding, newline="") as f:
                f.write(text)
            Path(temp_path).replace(self._path)
        except Exception:
            # Clean up temp file on failure
            Path(temp_path).unlink(missing_ok=True)
            raise
        logger.info(f"Wrote history to {self._path}")


class MemoryStore:
    """In-memory storage backend.

    Example:
        >>> storage = MemoryStore()
        >>> storage.read() is None
        True
    """

    def __init__(self, text: str | None = None) -> None:
        self.text = text

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
