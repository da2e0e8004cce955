from calepin.domain.knowledge.model.card import Card
from calepin.domain.knowledge.model.record import Page, Record, Source, SourceSchema
from calepin.domain.knowledge.model.value import (
    DateRange,
    PropertySchema,
    PropertyValue,
    SourceSnapshot,
    SourceStyle,
)

__all__ = [
    "Card",
    "DateRange",
    "Page",
    "PropertySchema",
    "PropertyValue",
    "Record",
    "Source",
    "SourceSchema",
    "SourceSnapshot",
    "SourceStyle",
]
