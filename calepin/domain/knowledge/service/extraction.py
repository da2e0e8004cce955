"""Normalize typed Notion property values.

Every declared type maps to a fixed shape:

    title, rich_text            -> str | None
    url, email, phone_number    -> str | None
    number                      -> int | float | None
    select                      -> str | None (option name)
    multi_select                -> list[str]
    date                        -> DateRange | None
    checkbox                    -> bool
    relation                    -> int (number of links)
    anything else               -> None

The mapping is total: malformed payloads degrade to the empty value of their
type instead of raising.
"""

from collections.abc import Callable, Mapping
from typing import Any

from calepin.domain.knowledge.model.value import DateRange, PropertyValue

TEXT_TYPES = frozenset({"title", "rich_text"})
STRING_TYPES = frozenset({"url", "email", "phone_number"})


def plain_text(fragments: Any) -> str | None:
    """Join the plain_text of rich text fragments; None when empty."""
    if not isinstance(fragments, list):
        return None
    text = "".join(
        value
        for fragment in fragments
        if isinstance(fragment, Mapping) and isinstance(value := fragment.get("plain_text"), str)
    )
    return text or None


def _option_name(option: Any) -> str | None:
    if isinstance(option, Mapping):
        name = option.get("name")
        return name if isinstance(name, str) and name else None
    return None


def _text(prop: Mapping[str, Any]) -> str | None:
    return plain_text(prop.get(prop["type"]))


def _string(prop: Mapping[str, Any]) -> str | None:
    value = prop.get(prop["type"])
    return value if isinstance(value, str) and value else None


def _number(prop: Mapping[str, Any]) -> int | float | None:
    value = prop.get("number")
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _select(prop: Mapping[str, Any]) -> str | None:
    return _option_name(prop.get("select"))


def _multi_select(prop: Mapping[str, Any]) -> list[str]:
    options = prop.get("multi_select")
    if not isinstance(options, list):
        return []
    return [name for name in map(_option_name, options) if name]


def _date(prop: Mapping[str, Any]) -> DateRange | None:
    value = prop.get("date")
    if not isinstance(value, Mapping) or not isinstance(value.get("start"), str):
        return None
    end = value.get("end")
    return DateRange(start=value["start"], end=end if isinstance(end, str) else None)


def _checkbox(prop: Mapping[str, Any]) -> bool:
    return prop.get("checkbox") is True


def _relation(prop: Mapping[str, Any]) -> int:
    links = prop.get("relation")
    return len(links) if isinstance(links, list) else 0


EXTRACTORS: dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "title": _text,
    "rich_text": _text,
    "url": _string,
    "email": _string,
    "phone_number": _string,
    "number": _number,
    "select": _select,
    "multi_select": _multi_select,
    "date": _date,
    "checkbox": _checkbox,
    "relation": _relation,
}


def extract_property_value(prop: Any) -> Any:
    """Return the normalized value of one raw property payload."""
    if not isinstance(prop, Mapping):
        return None
    kind = prop.get("type")
    extractor = EXTRACTORS.get(kind) if isinstance(kind, str) else None
    if extractor is None:
        return None
    return extractor(prop)


def extract_properties(
    raw: Any,
    *,
    keep_empty: bool = True,
    declared: frozenset[str] | None = None,
) -> dict[str, PropertyValue]:
    """Extract every property of a raw page payload.

    Args:
        raw: The page's ``properties`` mapping.
        keep_empty: Keep properties whose value is None (checkbox is always a bool).
        declared: When given, properties not declared on the parent source are dropped.
    """
    if not isinstance(raw, Mapping):
        return {}

    properties: dict[str, PropertyValue] = {}
    for name, prop in raw.items():
        if declared is not None and name not in declared:
            continue
        if not isinstance(prop, Mapping):
            continue
        value = extract_property_value(prop)
        if value is None and not keep_empty:
            continue
        properties[name] = PropertyValue(type=str(prop.get("type", "")), value=value)
    return properties
