import logging
from contextlib import asynccontextmanager

import httpx
import logfire
from fastapi import FastAPI, Request, Response

from calepin.application.api.rest.errors import internal_error_response, register_error_handlers
from calepin.application.api.rest.routes import health, proxy
from calepin.application.di import create_container
from calepin.config import Config, configure_logging
from calepin.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, PATCH, OPTIONS",
    "Access-Control-Allow-Headers": (
        "Origin, X-Requested-With, Content-Type, Accept, Authorization, Notion-Version, X-Notion-Secret"
    ),
    "Access-Control-Max-Age": "86400",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()


def add_cors(app: FastAPI) -> None:
    """Answer every pre-flight immediately and tag every response with CORS headers."""

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
            response = internal_error_response()
        response.headers.update(CORS_HEADERS)
        return response


def create_app(
    config: Config | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Settings; read from the environment when omitted.
        transport: Replaces the upstream network transport (tests).
    """
    config = config or Config()

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s proxy v%s", config.server.name, config.server.version)
    if not config.secret and config.proxy.secret_mode != "client":
        logger.warning("NOTION_SECRET is not set; proxied requests will fail with 500")

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    container = create_container(config, transport=transport)
    setup_dishka(container, app_instance)
    add_cors(app_instance)

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(proxy.create_router([config.proxy.prefix, *config.proxy.legacy_prefixes]))

    register_error_handlers(app_instance)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: `calepin proxy serve` handles this
# In tests: configure in conftest.py
app = create_app()
