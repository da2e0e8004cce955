"""HTTP adapter for the NotionGateway port.

Talks either to the Notion API directly (the secret is attached here) or to
a running Calepin proxy, which attaches the secret itself.
"""

import logging
import re
from typing import Any

import httpx

from calepin.config import Config
from calepin.domain.knowledge.port.gateway import NotionGateway
from calepin.domain.shared.error import (
    ConfigurationError,
    InvalidResponseError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_DATABASE_ID = re.compile(r"/databases/([^/?]+)")


def clean_endpoint(endpoint: str) -> str:
    """Leading slash, and hyphen-free ids in /databases/... endpoints."""
    endpoint = "/" + endpoint.lstrip("/")
    return _DATABASE_ID.sub(lambda m: "/databases/" + m.group(1).replace("-", ""), endpoint)


class HttpNotionGateway(NotionGateway):
    """Sends JSON requests and returns decoded JSON objects."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        secret: str | None = None,
        version: str = "2022-06-28",
        diagnostic_endpoints: tuple[str, ...] = ("search",),
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._secret = secret
        self._version = version
        self._diagnostic = diagnostic_endpoints

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._secret:
            headers["Authorization"] = f"Bearer {self._secret}"
            headers["Notion-Version"] = self._version
        return headers

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        endpoint = clean_endpoint(endpoint)
        url = f"{self._base_url}{endpoint}"
        diagnostic = any(marker in endpoint for marker in self._diagnostic)

        try:
            response = await self._client.request(method, url, json=body, headers=self._headers())
        except httpx.RequestError as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError(str(e) or type(e).__name__, url=url) from e

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            logger.error(
                "HTML response instead of JSON from %s (status %s): %s",
                url,
                response.status_code,
                response.text[:500],
            )
            raise InvalidResponseError(
                "The server returned HTML instead of JSON",
                url=url,
                status=response.status_code,
            )

        if not response.is_success:
            message = _error_message(response)
            if diagnostic:
                logger.warning(
                    "HTTP %s from %s | Response: %s", response.status_code, url, response.text[:1000]
                )
            raise UpstreamError(message, status=response.status_code, url=url)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Unreadable JSON from %s: %s", url, response.text[:500])
            raise InvalidResponseError(f"JSON parsing error: {e}", url=url) from e

        if not isinstance(data, dict):
            raise InvalidResponseError("Expected a JSON object", url=url)
        return data


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return f"HTTP {response.status_code}"


def build_gateway(config: Config, client: httpx.AsyncClient) -> HttpNotionGateway:
    """Gateway for the configured route: through the proxy, or direct with the secret.

    Raises:
        ConfigurationError: Direct access is configured but no secret is set.
    """
    if config.client.base_url:
        return HttpNotionGateway(
            client,
            config.client.base_url,
            diagnostic_endpoints=tuple(config.proxy.diagnostic_endpoints),
        )

    if not config.secret:
        raise ConfigurationError(
            "Set NOTION_SECRET (or CALEPIN_CLIENT__BASE_URL to go through a proxy)",
            code="NOTION_SECRET not configured",
        )
    return HttpNotionGateway(
        client,
        config.notion.api_url,
        secret=config.secret,
        version=config.notion.version,
        diagnostic_endpoints=tuple(config.proxy.diagnostic_endpoints),
    )
