"""Schema-driven validation of draft items."""

from page_clipper.validation.sanitizer import sanitize

__all__ = [
    "sanitize",
]
