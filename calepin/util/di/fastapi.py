"""Dishka FastAPI integration using the Calepin request scope."""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Send
from starlette.types import Scope as ASGIScope

from calepin.util.di.scope import Scope


class ContainerMiddleware:
    """ASGI middleware opening a Scope.REQUEST container for each HTTP request.

    Replaces dishka.integrations.starlette.ContainerMiddleware so that our
    own Scope enum is used instead of dishka.Scope.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: ASGIScope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=Scope.REQUEST,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Attach the container to the app and install the per-request middleware."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
