"""Tests for property value extraction."""

import pytest

from calepin.domain.knowledge.model.value import DateRange
from calepin.domain.knowledge.service.extraction import (
    extract_properties,
    extract_property_value,
    plain_text,
)


def text(*parts: str) -> list[dict]:
    return [{"type": "text", "plain_text": part} for part in parts]


class TestExtractPropertyValue:
    @pytest.mark.parametrize(
        ("prop", "expected"),
        [
            ({"type": "title", "title": text("Kind of Blue")}, "Kind of Blue"),
            ({"type": "rich_text", "rich_text": text("Miles ", "Davis")}, "Miles Davis"),
            ({"type": "url", "url": "https://example.com"}, "https://example.com"),
            ({"type": "email", "email": "a@example.com"}, "a@example.com"),
            ({"type": "phone_number", "phone_number": "+33 1 23"}, "+33 1 23"),
            ({"type": "number", "number": 42}, 42),
            ({"type": "number", "number": 0}, 0),
            ({"type": "select", "select": {"name": "Jazz"}}, "Jazz"),
            (
                {"type": "multi_select", "multi_select": [{"name": "Jazz"}, {"name": "Modal"}]},
                ["Jazz", "Modal"],
            ),
            ({"type": "checkbox", "checkbox": True}, True),
            ({"type": "relation", "relation": [{"id": "a"}, {"id": "b"}]}, 2),
        ],
    )
    def test_representative_values(self, prop, expected):
        assert extract_property_value(prop) == expected

    @pytest.mark.parametrize(
        ("prop", "expected"),
        [
            ({"type": "title", "title": []}, None),
            ({"type": "rich_text", "rich_text": None}, None),
            ({"type": "url", "url": None}, None),
            ({"type": "email", "email": None}, None),
            ({"type": "phone_number", "phone_number": None}, None),
            ({"type": "number", "number": None}, None),
            ({"type": "select", "select": None}, None),
            ({"type": "multi_select", "multi_select": []}, []),
            ({"type": "multi_select", "multi_select": None}, []),
            ({"type": "date", "date": None}, None),
            ({"type": "checkbox", "checkbox": None}, False),
            ({"type": "relation", "relation": None}, 0),
        ],
    )
    def test_null_values(self, prop, expected):
        assert extract_property_value(prop) == expected

    def test_date_keeps_start_and_end(self):
        prop = {"type": "date", "date": {"start": "2024-01-01", "end": "2024-01-03"}}

        assert extract_property_value(prop) == DateRange(start="2024-01-01", end="2024-01-03")

    def test_date_without_end(self):
        prop = {"type": "date", "date": {"start": "2024-01-01", "end": None}}

        assert extract_property_value(prop) == DateRange(start="2024-01-01")

    def test_date_without_start_is_none(self):
        assert extract_property_value({"type": "date", "date": {"end": "2024-01-01"}}) is None

    @pytest.mark.parametrize(
        "prop",
        [
            None,
            "title",
            42,
            {},
            {"type": None},
            {"type": ["title"]},
            {"type": "formula", "formula": {"type": "string", "string": "x"}},
            {"type": "rollup", "rollup": {}},
            {"type": "select", "select": "Jazz"},
            {"type": "number", "number": "12"},
            {"type": "number", "number": True},
            {"type": "title", "title": "not a list"},
            {"type": "title", "title": [{"plain_text": 5}]},
            {"type": "rich_text", "rich_text": [{"plain_text": ["x"]}]},
        ],
    )
    def test_unknown_or_malformed_is_none(self, prop):
        """Extraction never raises; unusable payloads give None."""
        assert extract_property_value(prop) is None


class TestPlainText:
    def test_joins_all_fragments(self):
        assert plain_text(text("a", "b", "c")) == "abc"

    def test_skips_fragments_without_text(self):
        assert plain_text([{"type": "mention"}, *text("x")]) == "x"

    def test_skips_non_string_text(self):
        assert plain_text([{"plain_text": 5}, {"plain_text": None}, *text("ok")]) == "ok"

    def test_empty_is_none(self):
        assert plain_text([]) is None
        assert plain_text(None) is None


class TestExtractProperties:
    def test_keeps_empty_values_by_default(self):
        raw = {
            "Name": {"type": "title", "title": text("Song")},
            "Note": {"type": "rich_text", "rich_text": []},
            "Like": {"type": "checkbox", "checkbox": False},
        }

        props = extract_properties(raw)

        assert props["Name"].value == "Song"
        assert props["Note"].value is None
        assert props["Like"].value is False

    def test_drops_empty_values_on_request(self):
        raw = {
            "Name": {"type": "title", "title": text("Song")},
            "Note": {"type": "rich_text", "rich_text": []},
            "Like": {"type": "checkbox", "checkbox": False},
        }

        props = extract_properties(raw, keep_empty=False)

        assert set(props) == {"Name", "Like"}

    def test_only_declared_names_are_kept(self):
        raw = {
            "Name": {"type": "title", "title": text("Song")},
            "Stray": {"type": "rich_text", "rich_text": text("x")},
        }

        props = extract_properties(raw, declared=frozenset({"Name"}))

        assert list(props) == ["Name"]

    def test_preserves_declared_type(self):
        props = extract_properties({"Score": {"type": "formula", "formula": {}}})

        assert props["Score"].type == "formula"
        assert props["Score"].value is None

    def test_non_mapping_is_empty(self):
        assert extract_properties(None) == {}
