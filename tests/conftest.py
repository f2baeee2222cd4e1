import asyncio
from collections import Counter
from datetime import datetime

import matplotlib

matplotlib.use("Agg")

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from apipulse.core.models import LoadTestStatistics, RequestResult


class TargetServer:
    """Local HTTP target that counts hits per route and keeps request details."""

    def __init__(self):
        self.hits = Counter()
        self.requests = []
        self.server = None

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    async def ok(self, request):
        self.hits["ok"] += 1
        return web.Response(text="ok")

    async def not_found(self, request):
        self.hits["not_found"] += 1
        return web.Response(status=404, text="missing")

    async def unavailable(self, request):
        self.hits["unavailable"] += 1
        return web.Response(status=503, text="try later")

    async def slow(self, request):
        self.hits["slow"] += 1
        await asyncio.sleep(1)
        return web.Response(text="late")

    async def echo(self, request):
        self.hits["echo"] += 1
        self.requests.append({
            "method": request.method,
            "query": dict(request.query),
            "body": await request.text(),
            "content_type": request.headers.get("Content-Type"),
            "user_agent": request.headers.get("User-Agent"),
        })
        return web.Response(text="echo")

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/ok", self.ok)
        app.router.add_route("*", "/not-found", self.not_found)
        app.router.add_route("*", "/unavailable", self.unavailable)
        app.router.add_route("*", "/slow", self.slow)
        app.router.add_route("*", "/echo", self.echo)
        return app


@pytest_asyncio.fixture
async def target():
    target = TargetServer()
    async with TestServer(target.app()) as server:
        target.server = server
        yield target


@pytest.fixture
def make_result():
    def _make(latency_ms=10.0, success=True, status_code=200, timestamp=1000.0, error=None):
        return RequestResult(
            latency_ms=latency_ms,
            success=success,
            status_code=status_code,
            timestamp=timestamp,
            error=error,
        )

    return _make


@pytest.fixture
def sample_stats():
    return LoadTestStatistics(
        target_url="https://api.example.com/health",
        host="api.example.com",
        thread_count=10,
        duration_seconds=30,
        min_latency_ms=12.0,
        max_latency_ms=480.5,
        avg_latency_ms=85.25,
        median_latency_ms=70.0,
        p95_latency_ms=310.75,
        total_requests=1200,
        successful_requests=1188,
        failed_requests=12,
        requests_per_second=40.0,
        success_rate=99.0,
        start_timestamp=datetime(2026, 3, 1, 12, 0, 0),
        end_timestamp=datetime(2026, 3, 1, 12, 0, 30),
    )
