"""Base protocol for history storage backends.

This module defines the StorageProtocol that all storage backends must implement.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol for history storage backends.

    Both calls are single-shot: the whole artifact is read or written,
    or the call fails without exposing partial state.

    Example:
        >>> class MyStorage:
        ...     def read(self) -> str | None: ...
        ...     def write(self, text: str) -> None: ...
        >>> isinstance(MyStorage(), StorageProtocol)
        True
    """

    def read(self) -> str | None:
        """Read the serialized history.

        Returns:
            The artifact text, or None if it does not exist yet.
        """
        ...

    def write(self, text: str) -> None:
        """Replace the serialized history.

        Args:
            text: The complete artifact text.
        """
        ...
