"""Tests for schema-driven draft sanitizing."""

import pytest

from page_clipper.store.models import Property
from page_clipper.validation.sanitizer import (
    coerce_date,
    coerce_multi_select,
    coerce_number,
    coerce_single_select,
    is_dropped,
    sanitize,
)


def _one(prop: Property, value):
    return sanitize({prop.key: value}, [prop])


NUMBER = Property(key="n", type="number")
SELECT = Property(key="s", type="singleSelect", options=["Todo", "Done"])
LEGACY_SELECT = Property(key="s", type="select", options=["Todo", "Done"])
MULTI = Property(key="m", type="multiSelect", options=["A", "B"])
DATE = Property(key="d", type="date")
TEXT = Property(key="t", type="text")


class TestNumber:
    @pytest.mark.parametrize("raw, expected", [("42", 42), ("3.5", 3.5), (" -7 ", -7), ("1e3", 1000.0)])
    def test_numeric_strings_become_numbers(self, raw, expected):
        assert _one(NUMBER, raw) == {"n": expected}

    @pytest.mark.parametrize("raw", ["forty", "", "1,234", "nan", None, True, ["1"]])
    def test_invalid_values_are_dropped(self, raw):
        assert _one(NUMBER, raw) == {}

    def test_absent_key_stays_absent(self):
        assert sanitize({}, [NUMBER]) == {}

    def test_existing_numbers_are_kept(self):
        assert _one(NUMBER, 2.5) == {"n": 2.5}
        assert coerce_number(0) == 0


class TestSingleSelect:
    def test_exact_match(self):
        assert _one(SELECT, "Done") == {"s": "Done"}

    def test_case_insensitive_match_uses_canonical_casing(self):
        assert _one(SELECT, "todo") == {"s": "Todo"}
        assert _one(LEGACY_SELECT, "DONE") == {"s": "Done"}

    @pytest.mark.parametrize("raw", ["Blocked", "", None, 3])
    def test_unmatched_or_empty_is_dropped(self, raw):
        assert _one(SELECT, raw) == {}

    def test_without_options_keeps_strings(self):
        assert coerce_single_select("Anything", None) == "Anything"


class TestMultiSelect:
    def test_filters_and_normalizes_entries(self):
        assert _one(MULTI, ["a", "C"]) == {"m": ["A"]}

    def test_no_valid_entries_drops_key(self):
        assert _one(MULTI, ["c"]) == {}

    def test_single_string_is_accepted(self):
        assert _one(MULTI, "b") == {"m": ["B"]}

    def test_duplicates_collapse(self):
        assert _one(MULTI, ["A", "a", "B"]) == {"m": ["A", "B"]}

    def test_empty_list_and_missing_options_drop(self):
        assert _one(MULTI, []) == {}
        assert is_dropped(coerce_multi_select(["A"], None))


class TestDate:
    def test_canonical_date_is_unchanged(self):
        assert _one(DATE, "2023-10-05") == {"d": "2023-10-05"}

    @pytest.mark.parametrize(
        "raw",
        [
            "Oct 5, 2023",
            "October 5 2023",
            "2023-10-05T14:30:00Z",
            "5 Oct 2023",
            "Published on Oct 5, 2023",
        ],
    )
    def test_natural_dates_are_reformatted(self, raw):
        assert _one(DATE, raw) == {"d": "2023-10-05"}

    @pytest.mark.parametrize("raw", ["not a date", "", None, "2023-13-45", 20231005])
    def test_unparseable_dates_are_dropped(self, raw):
        assert _one(DATE, raw) == {}

    def test_coerce_date_directly(self):
        assert coerce_date("2024-02-29") == "2024-02-29"


class TestOtherTypes:
    def test_text_is_kept(self):
        assert _one(TEXT, "hello") == {"t": "hello"}

    @pytest.mark.parametrize("raw", ["", None])
    def test_empty_and_null_are_dropped(self, raw):
        assert _one(TEXT, raw) == {}


def test_unknown_keys_pass_through(full_schema):
    draft = {"title": "Foo", "extra": "kept", "rating": "4"}

    assert sanitize(draft, full_schema) == {"title": "Foo", "extra": "kept", "rating": 4}


def test_input_draft_is_not_mutated(full_schema):
    draft = {"title": "Foo", "rating": "bad"}

    sanitize(draft, full_schema)

    assert draft == {"title": "Foo", "rating": "bad"}


def test_every_present_schema_value_is_conformant(full_schema):
    draft = {
        "title": "Foo",
        "rating": "7.5",
        "status": "done",
        "tags": ["b", "z"],
        "published": "Oct 5, 2023",
        "notes": "",
        "cover": "https://e.com/c.png",
    }

    assert sanitize(draft, full_schema) == {
        "title": "Foo",
        "rating": 7.5,
        "status": "Done",
        "tags": ["B"],
        "published": "2023-10-05",
        "cover": "https://e.com/c.png",
    }
