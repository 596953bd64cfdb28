from abc import ABC, abstractmethod
from typing import Any


class PersistenceGateway(ABC):
    """Key-value store holding whole JSON-serializable collections.

    Every ``set`` replaces the value for a key in one step; backends raise
    ``PersistenceError`` on any failure and never leave a half-written value.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...

    @abstractmethod
    def keys(self) -> list[str]: ...
