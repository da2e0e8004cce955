"""Notion proxy routes: everything under the proxy prefix is forwarded."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response

from calepin.domain.proxy.model.value import InboundRequest
from calepin.domain.proxy.service.proxy import ProxyService

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def forward(request: Request, service: FromDishka[ProxyService]) -> Response:
    inbound = InboundRequest(
        method=request.method,
        path=request.url.path,
        query=request.query_params.multi_items(),
        headers=dict(request.headers),
        body=await request.body(),
    )
    upstream = await service.forward(inbound)
    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
    )


def create_router(prefixes: list[str]) -> APIRouter:
    """Catch-all routes for each prefix, bare prefix included."""
    router = APIRouter(tags=["proxy"], route_class=DishkaRoute)
    for prefix in prefixes:
        prefix = "/" + prefix.strip("/")
        router.add_api_route(prefix, forward, methods=PROXY_METHODS, include_in_schema=False)
        router.add_api_route(
            prefix + "/{endpoint:path}", forward, methods=PROXY_METHODS, include_in_schema=False
        )
    return router
