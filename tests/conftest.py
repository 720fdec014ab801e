"""Shared fixtures."""

import httpx
import pytest

from page_clipper.config import RetryConfig
from page_clipper.http.executor import ResilientExecutor
from page_clipper.store.models import Property, Schema


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def executor(http_client, sleeps) -> ResilientExecutor:
    return ResilientExecutor(http_client, RetryConfig(max_attempts=3, base_delay=1.0), sleep=sleeps)


@pytest.fixture
def status_schema() -> Schema:
    return Schema(
        content_key="title",
        content_name="Title",
        properties=[
            Property(key="status", name="Status", type="singleSelect", options=["Todo", "Done"]),
        ],
    )


@pytest.fixture
def full_schema() -> Schema:
    return Schema(
        content_key="title",
        properties=[
            Property(key="rating", name="Rating", type="number"),
            Property(key="status", name="Status", type="singleSelect", options=["Todo", "Done"]),
            Property(key="tags", name="Tags", type="multiSelect", options=["A", "B"]),
            Property(key="published", name="Published", type="date"),
            Property(key="notes", name="Notes", type="text"),
            Property(key="cover", name="Cover", type="image"),
        ],
    )
