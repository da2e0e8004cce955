"""Knowledge base value objects."""

from datetime import datetime
from typing import Any

from calepin.domain.shared.model.value import ValueObject


class DateRange(ValueObject):
    """Normalized value of a date property."""

    start: str
    end: str | None = None


class PropertyValue(ValueObject):
    """A record property: its declared type and normalized value.

    See calepin.domain.knowledge.service.extraction for the value shape per type.
    """

    type: str
    value: Any = None


class PropertySchema(ValueObject):
    """Declared property of a source, with select/multi_select options."""

    type: str
    options: list[dict[str, Any]] | None = None


class SourceStyle(ValueObject):
    """Display style for a target source of the card feed."""

    name: str  # Source title, matched case-insensitively
    display_name: str
    color: str


class SourceSnapshot(ValueObject):
    """Per-source metadata used only to detect staleness of the card cache."""

    id: str
    record_count: int
    last_edited_time: datetime | None = None
    latest_record_edit: datetime | None = None
