"""Time-boxed card cache with per-source staleness detection."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError

from calepin.domain.knowledge.model.card import Card
from calepin.domain.knowledge.model.value import SourceSnapshot
from calepin.domain.knowledge.port.store import KeyValueStore
from calepin.domain.shared.model.value import ValueObject

logger = logging.getLogger(__name__)

CARDS_KEY = "notion_cards_cache"
METADATA_KEY = "notion_cache_metadata"
DEFAULT_TTL = timedelta(hours=24)


class CachedCards(ValueObject):
    timestamp: datetime
    cards: list[Card]


def _now() -> datetime:
    return datetime.now(UTC)


def _newer(now: datetime | None, before: datetime | None) -> bool:
    if now is None:
        return False
    return before is None or now > before


class CardCache:
    """Stores the aggregated card list and the snapshot it was built from.

    Args:
        store: Where entries live.
        ttl: Maximum age of a returned card list.
        clock: Returns the current (timezone-aware) time.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._clock = clock

    def get(self) -> list[Card] | None:
        """Cached cards, or None when missing or stale (stale entries are evicted)."""
        raw = self._store.get(CARDS_KEY)
        if raw is None:
            return None
        try:
            entry = CachedCards.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed card cache")
            self.clear()
            return None

        age = self._clock() - entry.timestamp
        if age > self._ttl:
            logger.info("Card cache expired (age %s)", age)
            self.clear()
            return None
        return entry.cards

    def set(self, cards: list[Card]) -> None:
        entry = CachedCards(timestamp=self._clock(), cards=cards)
        self._store.set(CARDS_KEY, entry.model_dump(mode="json"))

    def get_metadata(self) -> dict[str, SourceSnapshot] | None:
        raw = self._store.get(METADATA_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return {key: SourceSnapshot.model_validate(value) for key, value in raw.items()}
        except ValidationError:
            logger.warning("Discarding malformed cache metadata")
            self._store.delete(METADATA_KEY)
            return None

    def set_metadata(self, snapshot: dict[str, SourceSnapshot]) -> None:
        self._store.set(
            METADATA_KEY,
            {key: value.model_dump(mode="json") for key, value in snapshot.items()},
        )

    def has_changed(self, current: dict[str, SourceSnapshot]) -> bool:
        """Whether the sources moved on since the cached snapshot was taken."""
        cached = self.get_metadata()
        if cached is None:
            return True
        if cached.keys() - current.keys():
            return True

        for source_id, now in current.items():
            before = cached.get(source_id)
            if before is None:
                return True
            if now.record_count != before.record_count:
                return True
            if _newer(now.last_edited_time, before.last_edited_time):
                return True
            if _newer(now.latest_record_edit, before.latest_record_edit):
                return True
        return False

    def clear(self) -> None:
        self._store.delete(CARDS_KEY)
        self._store.delete(METADATA_KEY)
