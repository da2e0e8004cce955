import httpx
from dishka import AsyncContainer, Provider, from_context, make_async_container
from starlette.requests import Request

from calepin.config import Config
from calepin.infrastructure.http.di import HttpProvider
from calepin.util.di.scope import Scope


class ContextProvider(Provider):
    """Values handed to the container rather than built by it."""

    config = from_context(provides=Config, scope=Scope.APP)
    request = from_context(provides=Request, scope=Scope.REQUEST)


def create_container(
    config: Config | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()

    return make_async_container(
        ContextProvider(),
        HttpProvider(transport=transport),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
