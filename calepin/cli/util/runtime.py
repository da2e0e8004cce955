"""Wiring shared by the CLI commands: services, cache and failure reporting."""

import asyncio
import os
import sys
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, NoReturn, TypeVar

import httpx

from calepin.cli.console import get_console
from calepin.cli.util.paths import CalepinPaths
from calepin.config import Config
from calepin.domain.knowledge.service.cache import CardCache
from calepin.domain.knowledge.service.catalog import CatalogService
from calepin.domain.knowledge.service.feed import CardFeed
from calepin.domain.shared.error import CalepinError, ConfigurationError, TransportError
from calepin.infrastructure.cache.store import JsonFileStore
from calepin.infrastructure.http.notion import build_gateway

T = TypeVar("T")


def load_config(paths: CalepinPaths | None = None) -> Config:
    """Settings, reading ~/.config/calepin/config.yaml when no config file is given."""
    paths = paths or CalepinPaths()
    if "CALEPIN_CONFIG_FILE" not in os.environ and paths.config_file.exists():
        os.environ["CALEPIN_CONFIG_FILE"] = str(paths.config_file)
    return Config()


@asynccontextmanager
async def open_catalog(
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[CatalogService]:
    """A CatalogService whose HTTP client lives as long as the context."""
    async with httpx.AsyncClient(timeout=config.notion.timeout, transport=transport) as client:
        yield CatalogService(
            build_gateway(config, client),
            page_size=config.client.page_size,
            count_cap=config.client.count_cap,
        )


def card_cache(config: Config, paths: CalepinPaths | None = None) -> CardCache:
    paths = paths or CalepinPaths()
    return CardCache(JsonFileStore(paths.cache_dir), ttl=timedelta(hours=config.cache.ttl_hours))


def card_feed(config: Config, catalog: CatalogService, cache: CardCache) -> CardFeed:
    return CardFeed(catalog, cache, config.catalog.sources, config.catalog.default_color)


def hint_for(error: CalepinError) -> str | None:
    """What the user can try next."""
    status = getattr(error, "status", None)
    if status == 401:
        return "Check that NOTION_SECRET is a valid integration secret"
    if status == 404:
        return "Check the source id and that the database is shared with your integration"
    if isinstance(error, ConfigurationError):
        return "Set NOTION_SECRET in the environment or in .env"
    if isinstance(error, TransportError):
        return "Check your network connection (and CALEPIN_CLIENT__BASE_URL if using a proxy)"
    return None


def fail(error: CalepinError) -> NoReturn:
    get_console().error(error.message, hint=hint_for(error))
    sys.exit(1)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, exiting 1 on Calepin errors."""
    try:
        return asyncio.run(coro)
    except CalepinError as e:
        fail(e)
