"""Unit tests for CardFeed."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from calepin.domain.knowledge.model.record import Record, Source
from calepin.domain.knowledge.model.value import PropertyValue, SourceSnapshot, SourceStyle
from calepin.domain.knowledge.service.cache import CardCache
from calepin.domain.knowledge.service.catalog import CatalogService
from calepin.domain.knowledge.service.feed import CardFeed
from calepin.domain.shared.error import TransportError, UpstreamError
from calepin.infrastructure.cache.store import MemoryStore

EDITED = datetime(2024, 5, 1, tzinfo=UTC)

STYLES = [
    SourceStyle(name="Calepin musique", display_name="Musique", color="rgb(255 222 98)"),
    SourceStyle(name="Calepin web", display_name="Web", color="rgb(39 150 231)"),
]


def record(record_id: str, title: str) -> Record:
    return Record(
        id=record_id,
        created_time=EDITED,
        properties={"Name": PropertyValue(type="title", value=title)},
    )


@pytest.fixture
def catalog() -> CatalogService:
    catalog = MagicMock(spec=CatalogService)
    catalog.list_sources = AsyncMock(
        return_value=[
            Source(id="db-web", title="Calepin Web", properties=["Name"], last_edited_time=EDITED),
            Source(id="db-music", title="Calepin musique", properties=["Name"], last_edited_time=EDITED),
            Source(id="db-other", title="Journal", last_edited_time=EDITED),
        ]
    )
    catalog.count_records = AsyncMock(side_effect=lambda source_id: {"db-music": 2, "db-web": 1}[source_id])
    catalog.query_records = AsyncMock(
        side_effect=lambda source_id, declared=None: {
            "db-music": [record("m1", "So What"), record("m2", "Blue in Green")],
            "db-web": [record("w1", "A site")],
        }[source_id]
    )
    return catalog


@pytest.fixture
def cache() -> CardCache:
    return CardCache(MemoryStore())


class TestCardFeed:
    @pytest.mark.asyncio
    async def test_metadata_covers_target_sources_only(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)

        metadata = await feed.sources_metadata()

        assert metadata == {
            "db-music": SourceSnapshot(id="db-music", record_count=2, last_edited_time=EDITED),
            "db-web": SourceSnapshot(id="db-web", record_count=1, last_edited_time=EDITED),
        }

    @pytest.mark.asyncio
    async def test_cards_carry_source_style(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)

        cards = await feed.fetch_cards()

        assert [(c.id, c.title, c.source_name) for c in cards] == [
            ("m1", "So What", "Musique"),
            ("m2", "Blue in Green", "Musique"),
            ("w1", "A site", "Web"),
        ]
        assert cards[2].source_color == "rgb(39 150 231)"

    @pytest.mark.asyncio
    async def test_failing_source_yields_no_cards(self, catalog, cache):
        def query(source_id, declared=None):
            if source_id == "db-music":
                raise UpstreamError("Could not find database", status=404)
            return [record("w1", "A site")]

        catalog.query_records = AsyncMock(side_effect=query)
        feed = CardFeed(catalog, cache, STYLES)

        cards = await feed.fetch_cards()

        assert [c.id for c in cards] == ["w1"]

    @pytest.mark.asyncio
    async def test_load_populates_cache(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)

        cards = await feed.load()

        assert cache.get() == cards
        assert set(cache.get_metadata()) == {"db-music", "db-web"}

    @pytest.mark.asyncio
    async def test_load_serves_unchanged_cache(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)
        first = await feed.load()
        catalog.query_records.reset_mock()

        second = await feed.load()

        assert second == first
        catalog.query_records.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_refetches_when_counts_change(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)
        await feed.load()
        catalog.count_records = AsyncMock(side_effect=lambda source_id: 5)
        catalog.query_records.reset_mock()

        await feed.load()

        assert catalog.query_records.await_count == 2

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cache(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)
        await feed.load()
        catalog.query_records.reset_mock()

        await feed.load(refresh=True)

        assert catalog.query_records.await_count == 2

    @pytest.mark.asyncio
    async def test_cached_cards_survive_unreachable_api(self, catalog, cache):
        feed = CardFeed(catalog, cache, STYLES)
        cards = await feed.load()
        catalog.list_sources = AsyncMock(side_effect=TransportError("offline"))

        assert await feed.load() == cards

    @pytest.mark.asyncio
    async def test_unreachable_api_without_cache_raises(self, catalog, cache):
        catalog.list_sources = AsyncMock(side_effect=TransportError("offline"))
        feed = CardFeed(catalog, cache, STYLES)

        with pytest.raises(TransportError):
            await feed.load()
