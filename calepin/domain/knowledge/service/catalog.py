"""Read (and occasionally write) sources and records through the gateway."""

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from calepin.domain.knowledge.model.record import UNTITLED, Page, Record, Source, SourceSchema
from calepin.domain.knowledge.model.value import PropertySchema
from calepin.domain.knowledge.port.gateway import NotionGateway
from calepin.domain.knowledge.service.extraction import extract_properties, plain_text

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_COUNT_CAP = 1000
RECENT_FIRST = {"direction": "descending", "timestamp": "last_edited_time"}


def clean_source_id(source_id: str) -> str:
    return source_id.replace("-", "")


def _icon(raw: Any, *, files: bool = False) -> str | None:
    if not isinstance(raw, Mapping):
        return None
    if raw.get("type") == "emoji":
        return raw.get("emoji")
    if files:
        for kind in ("file", "external"):
            if raw.get("type") == kind and isinstance(raw.get(kind), Mapping):
                return raw[kind].get("url")
    return None


def to_source(raw: Mapping[str, Any]) -> Source:
    properties = raw.get("properties")
    return Source(
        id=raw["id"],
        title=plain_text(raw.get("title")) or UNTITLED,
        icon=_icon(raw.get("icon")),
        url=raw.get("url"),
        properties=list(properties) if isinstance(properties, Mapping) else [],
        created_time=raw.get("created_time"),
        last_edited_time=raw.get("last_edited_time"),
    )


def to_record(raw: Mapping[str, Any], declared: frozenset[str] | None = None) -> Record:
    return Record(
        id=raw["id"],
        url=raw.get("url"),
        created_time=raw.get("created_time"),
        last_edited_time=raw.get("last_edited_time"),
        archived=bool(raw.get("archived")),
        properties=extract_properties(raw.get("properties"), declared=declared),
    )


def to_page(raw: Mapping[str, Any]) -> Page:
    properties = extract_properties(raw.get("properties"), keep_empty=False)
    title = next(
        (p.value for p in properties.values() if p.type == "title" and p.value),
        UNTITLED,
    )
    parent = raw.get("parent")
    return Page(
        id=raw["id"],
        title=title,
        icon=_icon(raw.get("icon"), files=True),
        url=raw.get("url"),
        parent=dict(parent) if isinstance(parent, Mapping) else {},
        archived=bool(raw.get("archived")),
        properties=properties,
        created_time=raw.get("created_time"),
        last_edited_time=raw.get("last_edited_time"),
    )


class CatalogService:
    """Sources, records and pages of the workspace the secret can see."""

    def __init__(
        self,
        gateway: NotionGateway,
        page_size: int = DEFAULT_PAGE_SIZE,
        count_cap: int = DEFAULT_COUNT_CAP,
    ) -> None:
        self._gateway = gateway
        self.page_size = page_size
        self.count_cap = count_cap

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    async def list_sources(self) -> list[Source]:
        data = await self._gateway.request(
            "/search",
            method="POST",
            body={"filter": {"value": "database", "property": "object"}, "sort": RECENT_FIRST},
        )
        return [to_source(raw) for raw in data.get("results") or []]

    async def get_source(self, source_id: str) -> Source:
        return to_source(await self._gateway.request(f"/databases/{clean_source_id(source_id)}"))

    async def get_source_by_name(self, name: str) -> Source | None:
        """First source whose title matches, ignoring case."""
        wanted = name.strip().lower()
        for source in await self.list_sources():
            if source.title.lower() == wanted:
                return source
        return None

    async def get_source_schema(self, source_id: str) -> SourceSchema:
        raw = await self._gateway.request(f"/databases/{clean_source_id(source_id)}")
        properties: dict[str, PropertySchema] = {}
        for name, prop in (raw.get("properties") or {}).items():
            kind = prop.get("type", "")
            options = None
            if kind in ("select", "multi_select"):
                options = (prop.get(kind) or {}).get("options") or []
            properties[name] = PropertySchema(type=kind, options=options)
        return SourceSchema(
            id=raw["id"],
            title=plain_text(raw.get("title")) or UNTITLED,
            properties=properties,
        )

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    async def _paginate(
        self,
        endpoint: str,
        body: dict[str, Any],
    ) -> AsyncIterator[Mapping[str, Any]]:
        """Yield raw results one by one; the next page is only requested when needed."""
        cursor: str | None = None
        page = 0
        while True:
            payload = dict(body)
            if cursor:
                payload["start_cursor"] = cursor
            data = await self._gateway.request(endpoint, method="POST", body=payload)
            page += 1
            results = data.get("results") or []
            logger.debug("%s page %d: %d results", endpoint, page, len(results))
            for raw in results:
                yield raw

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return

    async def iter_records(
        self,
        source_id: str,
        *,
        page_size: int | None = None,
        limit: int | None = None,
        declared: frozenset[str] | None = None,
    ) -> AsyncIterator[Record]:
        """Every non-archived record of a source, stopping at ``limit`` records."""
        if limit is not None and limit <= 0:
            return
        endpoint = f"/databases/{clean_source_id(source_id)}/query"
        count = 0
        async for raw in self._paginate(endpoint, {"page_size": page_size or self.page_size}):
            if raw.get("archived"):
                continue
            yield to_record(raw, declared)
            count += 1
            if limit is not None and count >= limit:
                return

    async def query_records(
        self,
        source_id: str,
        *,
        page_size: int | None = None,
        limit: int | None = None,
        declared: frozenset[str] | None = None,
    ) -> list[Record]:
        return [
            record
            async for record in self.iter_records(
                source_id, page_size=page_size, limit=limit, declared=declared
            )
        ]

    async def count_records(self, source_id: str, cap: int | None = None) -> int:
        """Number of non-archived records, counting no further than ``cap``."""
        cap = cap if cap is not None else self.count_cap
        count = 0
        if cap <= 0:
            return count
        endpoint = f"/databases/{clean_source_id(source_id)}/query"
        async for raw in self._paginate(endpoint, {"page_size": self.page_size}):
            if raw.get("archived"):
                continue
            count += 1
            if count >= cap:
                logger.info("Stopped counting %s at %d records", source_id, cap)
                break
        return count

    async def sample_records(self, source_id: str, page_size: int = 1) -> tuple[list[Record], bool]:
        """One page of records and whether more exist."""
        data = await self._gateway.request(
            f"/databases/{clean_source_id(source_id)}/query",
            method="POST",
            body={"page_size": page_size},
        )
        records = [to_record(raw) for raw in data.get("results") or []]
        return records, bool(data.get("has_more"))

    async def create_record(self, source_id: str, properties: dict[str, Any]) -> Record:
        """Create a record from raw Notion property payloads."""
        raw = await self._gateway.request(
            "/pages",
            method="POST",
            body={"parent": {"database_id": clean_source_id(source_id)}, "properties": properties},
        )
        return to_record(raw)

    # -------------------------------------------------------------------------
    # Standalone pages
    # -------------------------------------------------------------------------

    def _page_search(self, page_size: int) -> dict[str, Any]:
        return {
            "filter": {"value": "page", "property": "object"},
            "sort": RECENT_FIRST,
            "page_size": page_size,
        }

    async def list_pages(self) -> list[Page]:
        """Every non-archived page visible to the secret, most recently edited first."""
        return [
            to_page(raw)
            async for raw in self._paginate("/search", self._page_search(self.page_size))
            if not raw.get("archived")
        ]

    async def recent_pages(self, limit: int = 20) -> tuple[list[Page], bool]:
        """The most recently edited pages and whether more exist."""
        data = await self._gateway.request("/search", method="POST", body=self._page_search(limit))
        return [to_page(raw) for raw in data.get("results") or []], bool(data.get("has_more"))
