"""Port for sending a forwarded request to the upstream API."""

from abc import abstractmethod
from typing import Protocol

from calepin.domain.proxy.model.value import UpstreamResponse


class UpstreamClient(Protocol):
    """Sends one request upstream.

    Raises TransportError when the upstream cannot be reached and
    InvalidResponseError when its body cannot be read.
    """

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> UpstreamResponse: ...
