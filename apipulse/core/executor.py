"""Single-request execution with retries and outcome classification."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import aiohttp
from yarl import URL

from .models import LoadTestConfig, RequestResult

# Statuses retried in addition to 5xx
RETRYABLE_STATUSES = {408}


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for transport errors and 5xx responses."""

    max_retries: int = 3
    base_delay: float = 0.1

    def delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""
        return self.base_delay * (2 ** attempt)

    def should_retry_status(self, status: int) -> bool:
        return status >= 500 or status in RETRYABLE_STATUSES


def build_target_url(config: LoadTestConfig) -> URL:
    """Merge configured query parameters into the target URL."""
    url = URL(config.target_url)
    if config.query_parameters:
        url = url.update_query(config.query_parameters)
    return url


class RequestExecutor:
    """Issues one logical request per call and classifies the outcome."""

    def __init__(self, config: LoadTestConfig, retry_policy: Optional[RetryPolicy] = None):
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(max_retries=config.max_retries)
        self.target_url = build_target_url(config)
        self.timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)

        self.headers = {}
        self.body: Optional[bytes] = None
        if config.sends_body:
            self.headers["Content-Type"] = config.content_type
            self.body = config.request_body.encode("utf-8")

        self.logger = logging.getLogger(__name__)

    async def _send(self, session: aiohttp.ClientSession) -> int:
        """Send a single attempt and return its status code."""
        async with session.request(
            self.config.method,
            self.target_url,
            data=self.body,
            headers=self.headers,
            timeout=self.timeout,
        ) as response:
            await response.read()
            return response.status

    async def _send_with_retries(self, session: aiohttp.ClientSession) -> int:
        attempt = 0
        while True:
            try:
                status = await self._send(session)
            except aiohttp.ClientError as e:
                # Timeouts are classified by the caller and never retried
                if isinstance(e, asyncio.TimeoutError):
                    raise
                if attempt >= self.retry_policy.max_retries:
                    raise
                self.logger.debug(f"Transport error on attempt {attempt + 1}: {e}")
            else:
                if (
                    not self.retry_policy.should_retry_status(status)
                    or attempt >= self.retry_policy.max_retries
                ):
                    return status
                self.logger.debug(f"HTTP {status} on attempt {attempt + 1}, retrying")

            attempt += 1
            await asyncio.sleep(self.retry_policy.delay(attempt))

    async def execute(self, session: aiohttp.ClientSession) -> RequestResult:
        """
        Execute one request, including retries, and return its result.

        Raises:
            asyncio.CancelledError: If the surrounding task is cancelled.
                No result is produced for the interrupted request.
        """
        start = time.perf_counter()

        try:
            status = await self._send_with_retries(session)
        except asyncio.TimeoutError:
            return self._failure(
                start, f"Request timeout after {self.config.timeout_seconds}s"
            )
        except aiohttp.ClientError as e:
            return self._failure(start, f"{type(e).__name__}: {e}")

        latency_ms = (time.perf_counter() - start) * 1000
        success = 200 <= status < 300
        return RequestResult(
            latency_ms=latency_ms,
            success=success,
            status_code=status,
            timestamp=time.time(),
            error=None if success else f"HTTP {status}",
        )

    def _failure(self, start: float, message: str) -> RequestResult:
        self.logger.debug(f"Request failed: {message}")
        return RequestResult(
            latency_ms=(time.perf_counter() - start) * 1000,
            success=False,
            status_code=0,
            timestamp=time.time(),
            error=message,
        )
