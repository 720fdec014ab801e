"""Metadata extraction from page markup."""

from page_clipper.extractor.metadata import DEFAULT_TITLE, extract_preview_image, extract_title

__all__ = [
    "DEFAULT_TITLE",
    "extract_preview_image",
    "extract_title",
]
