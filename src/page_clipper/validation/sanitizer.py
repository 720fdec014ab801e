"""Coerce a model-produced draft onto a collection schema.

Every function here is pure. ``sanitize`` returns a new dict in which each
schema property either holds a value of its declared type or is absent;
keys the schema does not know about are passed through unchanged.
"""

import math
import re
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

from page_clipper.store.models import DraftItem, Property, PropertyType, Schema

CANONICAL_DATE_FORMAT = "%Y-%m-%d"

_CANONICAL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^[+-]?\d+$")

# Sentinel for "drop this key".
_DROP = object()


def sanitize(draft: DraftItem, schema: Schema | Iterable[Property]) -> DraftItem:
    """Return a copy of ``draft`` conforming to ``schema``."""
    properties = schema.properties if isinstance(schema, Schema) else list(schema)
    result = dict(draft)
    for prop in properties:
        value = coerce_value(prop, result.get(prop.key))
        if value is _DROP:
            result.pop(prop.key, None)
        else:
            result[prop.key] = value
    return result


def coerce_value(prop: Property, value: Any) -> Any:
    """Coerce one value for ``prop``; returns the drop sentinel when invalid."""
    if prop.type == PropertyType.NUMBER.value:
        return coerce_number(value)
    if prop.is_select:
        return coerce_single_select(value, prop.options)
    if prop.type == PropertyType.MULTI_SELECT.value:
        return coerce_multi_select(value, prop.options)
    if prop.type == PropertyType.DATE.value:
        return coerce_date(value)
    if value is None or value == "":
        return _DROP
    return value


def is_dropped(value: Any) -> bool:
    return value is _DROP


def coerce_number(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return _DROP
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else _DROP
    if not isinstance(value, str):
        return _DROP
    text = value.strip()
    if _INT_RE.match(text):
        return int(text)
    try:
        number = float(text)
    except ValueError:
        return _DROP
    return number if math.isfinite(number) else _DROP


def match_option(value: str, options: list[str]) -> str | None:
    """Exact match first, then case-insensitive with canonical casing."""
    if value in options:
        return value
    lowered = value.casefold()
    for option in options:
        if option.casefold() == lowered:
            return option
    return None


def coerce_single_select(value: Any, options: list[str] | None) -> Any:
    if not isinstance(value, str) or not value:
        return _DROP
    if options is None:
        return value
    matched = match_option(value, options)
    return _DROP if matched is None else matched


def coerce_multi_select(value: Any, options: list[str] | None) -> Any:
    if not options:
        return _DROP
    if isinstance(value, str):
        entries = [value]
    elif isinstance(value, list):
        entries = [v for v in value if isinstance(v, str)]
    else:
        return _DROP

    selected: list[str] = []
    for entry in entries:
        matched = match_option(entry, options)
        if matched is not None and matched not in selected:
            selected.append(matched)
    # An empty list is never sent to the store.
    return selected or _DROP


def coerce_date(value: Any) -> Any:
    if not isinstance(value, str) or not value.strip():
        return _DROP
    text = value.strip()
    if _CANONICAL_DATE_RE.match(text):
        try:
            datetime.strptime(text, CANONICAL_DATE_FORMAT)
            return text
        except ValueError:
            return _DROP
    parsed = parse_natural_date(text)
    return _DROP if parsed is None else parsed.strftime(CANONICAL_DATE_FORMAT)


def parse_natural_date(text: str) -> date | None:
    """Parse free-form dates such as ``Oct 5, 2023``, also when embedded in a sentence."""
    try:
        return date_parser.parse(text, fuzzy=True).date()
    except (ValueError, OverflowError):
        return None
