"""Abstract base for key-value state stores."""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract base class for brain state storage.

    Values are JSON-serializable structures. A missing key is not an error.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Load the value stored under ``key``.

        Returns:
            The stored value, or None if the key was never set.

        Raises:
            PersistenceError: If the store exists but cannot be read.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``.

        Raises:
            PersistenceError: If the value cannot be written.
        """
        ...

    def keys(self) -> list[str]:
        """Keys currently stored. Backends may override for efficiency."""
        return []
