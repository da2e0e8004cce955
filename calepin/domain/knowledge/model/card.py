"""Card: the display projection of a record."""

from datetime import date

from calepin.domain.shared.model.value import ValueObject


class Card(ValueObject):
    """Flat, display-oriented view of a record.

    Every field is always present; optional ones are None rather than missing.
    """

    id: str
    url: str | None = None  # Record URL, or its "source" link field
    title: str
    artist: str | None = None
    genre: list[str] | None = None
    genre_class: str | None = None  # CSS-safe slug of the first genre
    note: str | None = None
    like: bool = False
    added_on: date | None = None
    source_name: str
    source_color: str
