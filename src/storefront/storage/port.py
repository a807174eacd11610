"""Client storage port (abstract interface).

Mirrors the browser's ``localStorage`` contract: string keys mapped to string
values, durable across restarts. Adapters:
- JsonFileStorage for real use
- MemoryStorage for tests and throwaway sessions
"""

from abc import ABC, abstractmethod


class KeyValueStorage(ABC):
    """Abstract durable key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        ...
