"""Conversions between draft values and user-editable text."""

from typing import Any

from page_clipper.store.models import DraftItem, DraftValue, Property, PropertyType

_IMAGE_KEY_MARKERS = ("image", "cover")


def format_value(value: Any) -> str:
    """Render a draft value as editable text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def parse_input(prop: Property, text: str) -> DraftValue:
    """Turn user text back into a draft value for ``prop``.

    Empty input clears the field. Validation is left to the sanitizer.
    """
    text = text.strip()
    if not text:
        return None
    if prop.type == PropertyType.MULTI_SELECT.value:
        return [part.strip() for part in text.split(",") if part.strip()]
    return text


def apply_edit(draft: DraftItem, key: str, value: DraftValue) -> DraftItem:
    """Return a copy of ``draft`` with ``key`` set, or removed when ``value`` is None."""
    updated = dict(draft)
    if value is None:
        updated.pop(key, None)
    else:
        updated[key] = value
    return updated


def resolve_image_url(draft: DraftItem, extracted: str | None) -> str | None:
    """Image URL for the appended image block.

    A non-empty string in any field whose key mentions an image or cover wins
    over the URL scraped from the page, so user edits are respected.
    """
    image_url = extracted or None
    for key, value in draft.items():
        if isinstance(value, str) and value.strip():
            lowered = key.lower()
            if any(marker in lowered for marker in _IMAGE_KEY_MARKERS):
                image_url = value.strip()
    return image_url
