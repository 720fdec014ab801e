"""Tests for the byte-bounded page fetcher."""

import asyncio

import httpx
import pytest

from page_clipper.config import FetcherConfig
from page_clipper.errors import HTTPError, InvalidURL, NetworkError
from page_clipper.fetcher.page_fetcher import PageFetcher

URL = "https://example.com/article"
MIB = 1024 * 1024


class ChunkSource:
    """Async byte stream that counts how many chunks were pulled."""

    def __init__(self, chunk: bytes, count: int | None = None):
        self.chunk = chunk
        self.count = count
        self.pulled = 0

    async def __aiter__(self):
        while self.count is None or self.pulled < self.count:
            self.pulled += 1
            yield self.chunk


@pytest.fixture
async def fetcher():
    async with PageFetcher(FetcherConfig(max_bytes=5 * MIB)) as f:
        yield f


async def test_fetch_returns_text(respx_mock, fetcher):
    respx_mock.get(URL).mock(
        return_value=httpx.Response(
            200, content="<title>Café</title>".encode(), headers={"Content-Type": "text/html; charset=utf-8"}
        )
    )

    assert await fetcher.fetch(URL) == "<title>Café</title>"


async def test_declared_oversize_fails_before_reading(respx_mock, fetcher):
    source = ChunkSource(b"x" * 1024, count=10)
    respx_mock.get(URL).mock(
        return_value=httpx.Response(200, headers={"Content-Length": str(10 * MIB)}, content=source)
    )

    with pytest.raises(HTTPError) as exc_info:
        await fetcher.fetch(URL)

    assert exc_info.value.status == 413
    assert "10MB" in exc_info.value.body
    assert source.pulled == 0


async def test_undeclared_stream_is_truncated_at_ceiling(respx_mock, fetcher):
    source = ChunkSource(b"a" * MIB)  # never ends on its own
    respx_mock.get(URL).mock(return_value=httpx.Response(200, content=source))

    text = await fetcher.fetch(URL)

    assert len(text) == 5 * MIB
    assert source.pulled <= 6


async def test_body_at_exact_ceiling_is_kept_whole(respx_mock):
    source = ChunkSource(b"b" * 1024, count=4)
    respx_mock.get(URL).mock(return_value=httpx.Response(200, content=source))

    async with PageFetcher(FetcherConfig(max_bytes=4096)) as fetcher:
        text = await fetcher.fetch(URL)

    assert text == "b" * 4096


async def test_cancellation_stops_streaming(respx_mock, fetcher):
    started = asyncio.Event()

    class SlowSource:
        pulled = 0

        async def __aiter__(self):
            while True:
                self.pulled += 1
                started.set()
                await asyncio.sleep(0.01)
                yield b"z" * 1024

    source = SlowSource()
    respx_mock.get(URL).mock(return_value=httpx.Response(200, content=source))

    task = asyncio.create_task(fetcher.fetch(URL))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    pulled = source.pulled
    await asyncio.sleep(0.05)
    assert source.pulled == pulled


async def test_error_status_raises(respx_mock, fetcher):
    respx_mock.get(URL).mock(return_value=httpx.Response(404, text="missing"))

    with pytest.raises(HTTPError) as exc_info:
        await fetcher.fetch(URL)

    assert exc_info.value.status == 404


async def test_transport_failure_is_network_error(respx_mock, fetcher):
    respx_mock.get(URL).mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(NetworkError):
        await fetcher.fetch(URL)


@pytest.mark.parametrize("url", ["ftp://example.com/file", "not a url", "file:///etc/passwd"])
async def test_non_http_urls_are_rejected(fetcher, url):
    with pytest.raises(InvalidURL):
        await fetcher.fetch(url)


async def test_fetch_requires_context_manager():
    with pytest.raises(RuntimeError):
        await PageFetcher().fetch(URL)
