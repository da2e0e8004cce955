"""Port for issuing requests against the Notion API."""

from abc import abstractmethod
from typing import Any, Protocol


class NotionGateway(Protocol):
    """Sends one request to the Notion API (directly or through the proxy).

    Implementations return the decoded JSON body and raise
    calepin.domain.shared.error.CalepinError subclasses on failure.
    """

    @abstractmethod
    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...
