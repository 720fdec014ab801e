"""Single-request executor with status classification and bounded retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from page_clipper.config import RetryConfig
from page_clipper.errors import DecodingError, HTTPError, NetworkError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ResilientExecutor:
    """Send one request with up to ``max_attempts`` tries.

    2xx returns immediately. 429 and 5xx responses, and transport failures,
    are retried after ``base_delay * 2 ** attempt`` seconds. Any other status
    fails at once. Cancellation propagates from every await, including the
    backoff sleep.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: RetryConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._client = client
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def execute(self, request: httpx.Request) -> tuple[bytes, int]:
        """Send ``request`` and return ``(body, status)`` for a 2xx response."""
        max_attempts = self.config.max_attempts

        for attempt in range(max_attempts):
            has_more = attempt < max_attempts - 1
            try:
                response = await self._client.send(request)
            except httpx.DecodingError as e:
                raise DecodingError("Could not decode response", str(e)) from e
            except httpx.TransportError as e:
                if not has_more:
                    raise NetworkError(str(e) or e.__class__.__name__) from e
                logger.warning(
                    "%s %s failed (%s), retrying",
                    request.method, request.url.path, e.__class__.__name__,
                )
                await self._backoff(attempt)
                continue

            status = response.status_code
            body = response.content

            if 200 <= status < 300:
                return body, status

            if self.is_retryable(status) and has_more:
                logger.warning(
                    "%s %s returned %d, retrying", request.method, request.url.path, status
                )
                await self._backoff(attempt)
                continue

            raise HTTPError(status, body)

        # range(max_attempts) always returns or raises above
        raise NetworkError("no attempts made")

    @staticmethod
    def is_retryable(status: int) -> bool:
        """Rate limiting and server errors are transient."""
        return status == 429 or status >= 500

    def delay_for(self, attempt: int) -> float:
        return min(self.config.base_delay * (2 ** attempt), self.config.max_delay)

    async def _backoff(self, attempt: int) -> None:
        delay = self.delay_for(attempt)
        logger.debug("Backing off %.1fs before attempt %d", delay, attempt + 2)
        await self._sleep(delay)
