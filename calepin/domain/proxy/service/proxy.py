"""Forward inbound requests to the Notion API."""

import logging
from collections.abc import Sequence
from urllib.parse import urlencode

from calepin.config import Config
from calepin.domain.proxy.model.value import InboundRequest, UpstreamResponse
from calepin.domain.proxy.port.secret import SecretResolver
from calepin.domain.proxy.port.upstream import UpstreamClient
from calepin.domain.shared.error import ConfigurationError, RoutingError

logger = logging.getLogger(__name__)

MISSING_SECRET = "NOTION_SECRET not configured"
MISSING_SECRET_HINT = (
    "Please configure NOTION_SECRET or VITE_NOTION_SECRET as environment variable on the server"
)
INVALID_ENDPOINT = "Invalid endpoint"
INVALID_ENDPOINT_HINT = (
    "The API endpoint is missing. Expected format: /api/notion/search, /api/notion/databases/..."
)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
DEFAULT_CONTENT_TYPE = "application/json"


def resolve_endpoint(path: str, prefixes: Sequence[str]) -> str:
    """Strip every leading proxy prefix and slash from an inbound path.

    >>> resolve_endpoint("/api/notion/databases/abc/query", ["/api/notion"])
    'databases/abc/query'
    """
    ordered = sorted((p.rstrip("/") for p in prefixes if p.strip("/")), key=len, reverse=True)
    endpoint = "/" + path.lstrip("/")
    stripped = True
    while stripped:
        stripped = False
        for prefix in ordered:
            if endpoint == prefix or endpoint.startswith(prefix + "/"):
                endpoint = "/" + endpoint[len(prefix) :].lstrip("/")
                stripped = True
                break
    return endpoint.lstrip("/")


class ProxyService:
    """Attaches the secret and pinned version header, then relays upstream."""

    def __init__(
        self,
        upstream: UpstreamClient,
        secrets: SecretResolver,
        config: Config,
    ) -> None:
        self._upstream = upstream
        self._secrets = secrets
        self._notion = config.notion
        self._proxy = config.proxy

    @property
    def prefixes(self) -> list[str]:
        return [self._proxy.prefix, *self._proxy.legacy_prefixes]

    def endpoint_for(self, request: InboundRequest) -> str:
        """Upstream endpoint of a request; the routing parameter wins over the path."""
        for name, value in request.query:
            if name == self._proxy.routing_param:
                return resolve_endpoint(value, self.prefixes)
        return resolve_endpoint(request.path, self.prefixes)

    def upstream_url(self, endpoint: str, query: Sequence[tuple[str, str]]) -> str:
        url = f"{self._notion.api_url.rstrip('/')}/{endpoint}"
        forwarded = [(k, v) for k, v in query if k != self._proxy.routing_param]
        if forwarded:
            url = f"{url}?{urlencode(forwarded)}"
        return url

    def _is_diagnostic(self, endpoint: str) -> bool:
        return any(marker in endpoint for marker in self._proxy.diagnostic_endpoints)

    async def forward(self, request: InboundRequest) -> UpstreamResponse:
        """Relay one request and return the upstream answer verbatim.

        Raises:
            ConfigurationError: No secret could be resolved (checked first).
            RoutingError: Nothing remains once the prefix is removed.
            TransportError: The upstream could not be reached.
            InvalidResponseError: The upstream body could not be read.
        """
        secret = self._secrets.resolve(request.headers)
        if not secret:
            logger.error("Refusing %s %s: no Notion secret configured", request.method, request.path)
            raise ConfigurationError(MISSING_SECRET_HINT, code=MISSING_SECRET)

        endpoint = self.endpoint_for(request)
        if not endpoint:
            raise RoutingError(INVALID_ENDPOINT_HINT, code=INVALID_ENDPOINT)

        method = request.method.upper()
        url = self.upstream_url(endpoint, request.query)
        headers = {
            "Authorization": f"Bearer {secret}",
            "Notion-Version": self._notion.version,
            "Content-Type": "application/json",
        }
        body = request.body if method in BODY_METHODS and request.body else None

        logger.debug("Forwarding %s %s", method, url)
        response = await self._upstream.send(method, url, headers=headers, body=body)

        if response.status_code >= 400 and self._is_diagnostic(endpoint):
            logger.warning(
                "[API /%s] HTTP %s | URL: %s | Response: %s",
                endpoint,
                response.status_code,
                url,
                response.body[:1000].decode("utf-8", errors="replace"),
            )

        return UpstreamResponse(
            status_code=response.status_code,
            content_type=response.content_type or DEFAULT_CONTENT_TYPE,
            body=response.body,
        )
