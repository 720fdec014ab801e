"""Streaming page fetcher with a hard byte ceiling."""

import logging
from urllib.parse import urlparse

import httpx

from page_clipper.config import FetcherConfig
from page_clipper.errors import HTTPError, InvalidURL, NetworkError

logger = logging.getLogger(__name__)

_MIB = 1024 * 1024


class PageFetcher:
    """Fetch a page's markup without ever holding more than ``max_bytes``.

    A declared ``Content-Length`` above the ceiling fails with HTTP 413 before
    the body is read. Undeclared bodies are truncated at the ceiling.
    """

    def __init__(self, config: FetcherConfig | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or FetcherConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Initialize HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.config.user_agent},
                follow_redirects=True,
                timeout=self.config.timeout_ms / 1000,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> str:
        """Fetch ``url`` and return its (possibly truncated) text."""
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")
        validate_url(url)

        max_bytes = self.config.max_bytes
        try:
            async with self._client.stream("GET", url) as response:
                declared = _content_length(response)
                if declared is not None and declared > max_bytes:
                    raise HTTPError(
                        413,
                        f"Page too large ({declared // _MIB}MB). Max: {max_bytes // _MIB}MB",
                    )
                if response.status_code >= 400:
                    raise HTTPError(response.status_code, f"Could not load page: {url}")

                buffer = bytearray()
                # Each chunk read is an await, so cancellation stops the transfer promptly.
                async for chunk in response.aiter_bytes():
                    remaining = max_bytes - len(buffer)
                    buffer.extend(chunk[:remaining])
                    if len(chunk) >= remaining:
                        logger.debug("Truncated %s at %d bytes", url, max_bytes)
                        break

                encoding = response.encoding or "utf-8"
        except httpx.TransportError as e:
            raise NetworkError(str(e) or e.__class__.__name__) from e

        try:
            return bytes(buffer).decode(encoding, errors="replace")
        except LookupError:
            return bytes(buffer).decode("utf-8", errors="replace")


def validate_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURL(f"Cannot fetch {url!r}: only http(s) URLs are supported")


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
