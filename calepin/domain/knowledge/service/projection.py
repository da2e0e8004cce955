"""Project records onto display cards.

Card fields are located by an explicit, ordered list of matchers. For each
field the first property (in record order) accepted by its matcher wins; the
title additionally falls back to the first title-typed property, then to
"Untitled". A missing added-date falls back to the record's creation day.
"""

import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from calepin.domain.knowledge.model.card import Card
from calepin.domain.knowledge.model.record import UNTITLED, Record
from calepin.domain.knowledge.model.value import DateRange, PropertyValue

DEFAULT_SOURCE_NAME = "Database"
DEFAULT_SOURCE_COLOR = "#6B7280"


def serialize_for_class(value: Any) -> str:
    """Turn a label into a CSS class fragment ('Jazz & Blues' -> 'jazz-blues')."""
    if not isinstance(value, str) or not value:
        return ""
    text = unicodedata.normalize("NFD", value.lower().strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


# =============================================================================
# Value converters (None means "no usable value, keep looking")
# =============================================================================


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _label(value: Any) -> str | None:
    if isinstance(value, list):
        value = ", ".join(v for v in value if isinstance(v, str) and v)
    return _string(value)


def _non_blank(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def _genres(value: Any) -> list[str] | None:
    if isinstance(value, str) and value:
        return [value]
    if isinstance(value, list):
        names = [v for v in value if isinstance(v, str) and v]
        return names or None
    return None


def _flag(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _day(value: Any) -> date | None:
    if not isinstance(value, DateRange):
        return None
    try:
        return date.fromisoformat(value.start[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class FieldMatcher:
    """Locates one card field among a record's properties."""

    field: str
    types: frozenset[str]
    convert: Callable[[Any], Any]
    names: frozenset[str] = frozenset()  # Exact names, lowercase
    fragments: tuple[str, ...] = ()  # Or any of these inside the name

    def accepts(self, name: str, prop: PropertyValue) -> bool:
        key = name.lower()
        named = key in self.names or any(fragment in key for fragment in self.fragments)
        return named and prop.type in self.types

    def find(self, properties: dict[str, PropertyValue]) -> Any:
        """Converted value of the first accepted property, or None."""
        for name, prop in properties.items():
            if not self.accepts(name, prop):
                continue
            value = self.convert(prop.value)
            if value is not None:
                return value
        return None


CARD_MATCHERS: tuple[FieldMatcher, ...] = (
    FieldMatcher("title", frozenset({"title"}), _string, names=frozenset({"title", "titre"})),
    FieldMatcher(
        "artist",
        frozenset({"title", "rich_text", "select", "multi_select", "url"}),
        _label,
        names=frozenset({"artist", "artiste"}),
    ),
    FieldMatcher(
        "genre",
        frozenset({"select", "multi_select"}),
        _genres,
        names=frozenset({"genre", "genres"}),
    ),
    FieldMatcher("url", frozenset({"url", "rich_text"}), _string, names=frozenset({"source"})),
    FieldMatcher("note", frozenset({"rich_text"}), _non_blank, names=frozenset({"note", "notes"})),
    FieldMatcher("like", frozenset({"checkbox"}), _flag, names=frozenset({"like"})),
    FieldMatcher(
        "added_on",
        frozenset({"date"}),
        _day,
        fragments=("date", "ajout", "added", "créé", "created"),
    ),
)


def first_title(properties: dict[str, PropertyValue]) -> str | None:
    """Value of the first non-empty title-typed property."""
    for prop in properties.values():
        if prop.type == "title" and _string(prop.value):
            return prop.value
    return None


def project_card(
    record: Record,
    source_name: str = DEFAULT_SOURCE_NAME,
    source_color: str = DEFAULT_SOURCE_COLOR,
) -> Card:
    """Map a record onto a fully populated card."""
    found = {m.field: m.find(record.properties) for m in CARD_MATCHERS}

    title = found["title"] or first_title(record.properties) or UNTITLED
    added_on = found["added_on"]
    if added_on is None and record.created_time is not None:
        added_on = record.created_time.date()
    genre = found["genre"]
    genre_class = serialize_for_class(genre[0]) if genre else ""

    return Card(
        id=record.id,
        url=found["url"] or record.url,
        title=title,
        artist=found["artist"],
        genre=genre,
        genre_class=genre_class or None,
        note=found["note"],
        like=bool(found["like"]),
        added_on=added_on,
        source_name=source_name,
        source_color=source_color,
    )
