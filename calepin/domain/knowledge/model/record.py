"""Sources (Notion databases) and the records they contain."""

from datetime import datetime
from typing import Any

from calepin.domain.knowledge.model.value import PropertySchema, PropertyValue
from calepin.domain.shared.model.value import ValueObject

UNTITLED = "Untitled"


class Source(ValueObject):
    """A document collection."""

    id: str
    title: str = UNTITLED
    icon: str | None = None
    url: str | None = None
    properties: list[str] = []  # Declared property names, in upstream order
    created_time: datetime | None = None
    last_edited_time: datetime | None = None


class SourceSchema(ValueObject):
    """Declared properties of a source."""

    id: str
    title: str = UNTITLED
    properties: dict[str, PropertySchema] = {}


class Record(ValueObject):
    """An item inside a source."""

    id: str
    url: str | None = None
    created_time: datetime | None = None
    last_edited_time: datetime | None = None
    archived: bool = False
    properties: dict[str, PropertyValue] = {}


class Page(ValueObject):
    """A page returned by the workspace-wide search."""

    id: str
    title: str = UNTITLED
    icon: str | None = None
    url: str | None = None
    parent: dict[str, Any] = {}
    archived: bool = False
    properties: dict[str, PropertyValue] = {}
    created_time: datetime | None = None
    last_edited_time: datetime | None = None
