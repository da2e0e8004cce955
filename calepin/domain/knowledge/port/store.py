"""Port for the key-value store behind the card cache."""

from abc import abstractmethod
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Persistent map of JSON-compatible values."""

    @abstractmethod
    def get(self, key: str) -> Any | None: ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...
