"""Tests for draft editing helpers."""

from page_clipper.editing import apply_edit, format_value, parse_input, resolve_image_url
from page_clipper.store.models import Property


def test_format_value():
    assert format_value(None) == ""
    assert format_value(5.0) == "5"
    assert format_value(2.5) == "2.5"
    assert format_value(["A", "B"]) == "A, B"
    assert format_value("x") == "x"


def test_parse_input_splits_multi_select():
    prop = Property(key="tags", type="multiSelect", options=["A", "B"])

    assert parse_input(prop, "A, b ,") == ["A", "b"]


def test_parse_input_blank_clears():
    assert parse_input(Property(key="n", type="number"), "   ") is None


def test_parse_input_keeps_text_for_sanitizer():
    assert parse_input(Property(key="n", type="number"), " 12 ") == "12"


def test_apply_edit_sets_and_removes_without_mutating():
    draft = {"title": "Foo", "notes": "old"}

    assert apply_edit(draft, "notes", "new") == {"title": "Foo", "notes": "new"}
    assert apply_edit(draft, "notes", None) == {"title": "Foo"}
    assert draft == {"title": "Foo", "notes": "old"}


def test_resolve_image_url_prefers_edited_image_fields():
    draft = {"title": "Foo", "Cover Image": "https://e.com/edited.png"}

    assert resolve_image_url(draft, "https://e.com/og.png") == "https://e.com/edited.png"


def test_resolve_image_url_falls_back_to_extracted():
    assert resolve_image_url({"title": "Foo", "cover": ""}, "https://e.com/og.png") == "https://e.com/og.png"
    assert resolve_image_url({"title": "Foo"}, "") is None
