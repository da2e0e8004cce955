"""HTTP adapter for the UpstreamClient port."""

import httpx

from calepin.domain.proxy.model.value import UpstreamResponse
from calepin.domain.proxy.port.upstream import UpstreamClient
from calepin.domain.shared.error import InvalidResponseError, TransportError

INVALID_RESPONSE = "Invalid response from Notion API"
TRANSPORT_FAILURE = "Transport error"


class HttpUpstreamClient(UpstreamClient):
    """Sends forwarded requests with a shared httpx client."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> UpstreamResponse:
        try:
            response = await self._client.request(method, url, headers=headers, content=body)
        except httpx.DecodingError as e:
            raise InvalidResponseError(str(e), code=INVALID_RESPONSE, url=url) from e
        except httpx.RequestError as e:
            raise TransportError(str(e) or type(e).__name__, code=TRANSPORT_FAILURE, url=url) from e

        return UpstreamResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            body=response.content,
        )
