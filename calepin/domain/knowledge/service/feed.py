"""CardFeed - aggregates the target sources into one cached card list."""

import logging

import logfire

from calepin.domain.knowledge.model.card import Card
from calepin.domain.knowledge.model.record import Source
from calepin.domain.knowledge.model.value import SourceSnapshot, SourceStyle
from calepin.domain.knowledge.service.cache import CardCache
from calepin.domain.knowledge.service.catalog import CatalogService
from calepin.domain.knowledge.service.projection import project_card
from calepin.domain.shared.error import CalepinError

logger = logging.getLogger(__name__)


class CardFeed:
    """Cards of every configured target source, served from cache while unchanged.

    Sources are matched to their style by title, ignoring case. A source
    that cannot be read contributes no cards; the others are still served.
    """

    def __init__(
        self,
        catalog: CatalogService,
        cache: CardCache,
        styles: list[SourceStyle],
        default_color: str = "var(--highlight-color)",
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        self._styles = styles
        self._default_color = default_color

    async def _targets(self) -> list[tuple[Source, SourceStyle]]:
        sources = await self._catalog.list_sources()
        by_title = {source.title.lower(): source for source in reversed(sources)}
        targets = []
        for style in self._styles:
            source = by_title.get(style.name.lower())
            if source is None:
                logger.warning("Source %r not found or not shared with the integration", style.name)
                continue
            targets.append((source, style))
        return targets

    async def sources_metadata(self) -> dict[str, SourceSnapshot]:
        """Record count and last edit of every target source found."""
        snapshot: dict[str, SourceSnapshot] = {}
        for source, _ in await self._targets():
            count = await self._catalog.count_records(source.id)
            snapshot[source.id] = SourceSnapshot(
                id=source.id,
                record_count=count,
                last_edited_time=source.last_edited_time,
            )
        return snapshot

    async def fetch_cards(self) -> list[Card]:
        """Project every record of every target source, bypassing the cache."""
        cards: list[Card] = []
        for source, style in await self._targets():
            with logfire.span("FetchSourceCards", source=style.name):
                try:
                    records = await self._catalog.query_records(
                        source.id, declared=frozenset(source.properties) or None
                    )
                except CalepinError as e:
                    logger.error("Failed to fetch records of %s: %s", style.name, e.message)
                    continue
                name = style.display_name or source.title
                color = style.color or self._default_color
                cards.extend(project_card(record, name, color) for record in records)
                logfire.info("Source cards fetched", source=style.name, count=len(records))
        return cards

    async def load(self, refresh: bool = False) -> list[Card]:
        """Cached cards when still current, otherwise a fresh aggregation.

        Raises:
            CalepinError: The sources could not be listed and nothing is cached.
        """
        with logfire.span("LoadCardFeed", refresh=refresh):
            cached = None if refresh else self._cache.get()

            try:
                current = await self.sources_metadata()
            except CalepinError as e:
                if cached is None:
                    raise
                logger.warning("Serving cached cards, metadata unavailable: %s", e.message)
                return cached

            if cached is not None and not self._cache.has_changed(current):
                logfire.info("Card cache hit", count=len(cached))
                return cached

            cards = await self.fetch_cards()
            self._cache.set(cards)
            self._cache.set_metadata(current)
            logfire.info("Card cache refreshed", count=len(cards))
            return cards
