"""DI provider for HTTP infrastructure."""

from collections.abc import AsyncIterator
from typing import NewType

import httpx
from dishka import Provider, provide

from calepin.config import Config
from calepin.domain.proxy.port.secret import SecretResolver
from calepin.domain.proxy.port.upstream import UpstreamClient
from calepin.domain.proxy.service.proxy import ProxyService
from calepin.infrastructure.http.secret import build_secret_resolver
from calepin.infrastructure.http.upstream import HttpUpstreamClient
from calepin.util.di.scope import Scope

# The single client used for outbound proxy requests
UpstreamHttpClient = NewType("UpstreamHttpClient", httpx.AsyncClient)


class HttpProvider(Provider):
    """DI provider for the proxy's upstream HTTP stack.

    Args:
        transport: Replaces the network transport (httpx.MockTransport in tests).
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__()
        self._transport = transport

    @provide(scope=Scope.APP)
    async def get_upstream_http_client(self, config: Config) -> AsyncIterator[UpstreamHttpClient]:
        client = httpx.AsyncClient(timeout=config.notion.timeout, transport=self._transport)
        yield UpstreamHttpClient(client)
        await client.aclose()

    @provide(scope=Scope.APP, provides=UpstreamClient)
    def get_upstream_client(self, client: UpstreamHttpClient) -> HttpUpstreamClient:
        return HttpUpstreamClient(client)

    @provide(scope=Scope.APP)
    def get_secret_resolver(self, config: Config) -> SecretResolver:
        return build_secret_resolver(config)

    @provide(scope=Scope.APP)
    def get_proxy_service(
        self,
        upstream: UpstreamClient,
        secrets: SecretResolver,
        config: Config,
    ) -> ProxyService:
        return ProxyService(upstream, secrets, config)
