"""Page fetching under a byte budget."""

from page_clipper.fetcher.page_fetcher import PageFetcher, validate_url

__all__ = [
    "PageFetcher",
    "validate_url",
]
