"""Port for acquiring the bearer secret attached to upstream requests."""

from abc import abstractmethod
from collections.abc import Mapping
from typing import Protocol


class SecretResolver(Protocol):
    """Decides which secret authenticates a forwarded request."""

    @abstractmethod
    def resolve(self, headers: Mapping[str, str]) -> str | None:
        """Return the secret for a request with these (lowercase) headers, or None."""
        ...
