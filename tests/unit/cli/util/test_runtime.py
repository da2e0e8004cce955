"""Tests for the CLI wiring helpers."""

from datetime import timedelta
from pathlib import Path

import httpx
import pytest

from calepin.cli.util.paths import CalepinPaths
from calepin.cli.util.runtime import card_cache, hint_for, load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.card import Card
from calepin.domain.shared.error import ConfigurationError, TransportError, UpstreamError


class TestHints:
    @pytest.mark.parametrize(
        ("error", "fragment"),
        [
            (UpstreamError("API token is invalid.", status=401), "NOTION_SECRET"),
            (UpstreamError("Could not find database", status=404), "shared"),
            (ConfigurationError("missing"), "NOTION_SECRET"),
            (TransportError("offline"), "network"),
        ],
    )
    def test_hint(self, error, fragment):
        assert fragment in hint_for(error)

    def test_no_hint_for_other_statuses(self):
        assert hint_for(UpstreamError("Rate limited", status=429)) is None


class TestRun:
    def test_returns_result(self):
        async def ok() -> int:
            return 3

        assert run(ok()) == 3

    def test_exits_on_calepin_error(self, capsys):
        async def broken() -> None:
            raise UpstreamError("Could not find database", status=404)

        with pytest.raises(SystemExit) as exc_info:
            run(broken())

        assert exc_info.value.code == 1
        assert "Could not find database" in capsys.readouterr().err


class TestLoadConfig:
    def test_reads_user_config_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        paths = CalepinPaths(config_dir=tmp_path)
        paths.config_file.write_text("cache:\n  ttl_hours: 3\n")

        assert load_config(paths).cache.ttl_hours == 3.0

    def test_without_user_config_file(self, tmp_path: Path):
        assert load_config(CalepinPaths(config_dir=tmp_path)).cache.ttl_hours == 24.0


class TestCardCache:
    def test_uses_cache_directory_and_ttl(self, tmp_path: Path):
        config = Config(cache={"ttl_hours": 2})
        cache = card_cache(config, CalepinPaths(cache_dir=tmp_path))

        cache.set([Card(id="a", title="t", source_name="Web", source_color="#000")])

        assert (tmp_path / "notion_cards_cache.json").exists()
        assert cache._ttl == timedelta(hours=2)


class TestOpenCatalog:
    @pytest.mark.asyncio
    async def test_goes_through_configured_proxy(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"results": []})

        config = Config(client={"base_url": "http://localhost:3000/api/notion", "page_size": 25})

        async with open_catalog(config, transport=httpx.MockTransport(handler)) as catalog:
            assert await catalog.list_sources() == []
            assert catalog.page_size == 25

        assert seen == ["http://localhost:3000/api/notion/search"]

    @pytest.mark.asyncio
    async def test_direct_access_without_secret(self):
        with pytest.raises(ConfigurationError):
            async with open_catalog(Config()):
                pass
