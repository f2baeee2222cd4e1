"""Core load testing functionality."""

import asyncio
import inspect
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, List, Optional, Set

import aiohttp

from .aggregator import build_chart_data, build_statistics
from .cancellation import CancellationToken, DeadlineSignal
from .exceptions import ConfigurationError
from .executor import RequestExecutor, RetryPolicy
from .models import LoadTestConfig, LoadTestResult, ProgressSnapshot, RunOutcome
from .recorder import ResultRecorder

PROGRESS_INTERVAL_SECONDS = 0.1
USER_AGENT = "ApiPulse/1.0"
# How long a finished run waits for outstanding progress sink calls
SINK_FLUSH_SECONDS = 0.25

ProgressSink = Callable[[ProgressSnapshot], Any]
SessionFactory = Callable[[LoadTestConfig], aiohttp.ClientSession]


class LoadTestState(Enum):
    """Lifecycle of a load test run."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"


def default_session_factory(config: LoadTestConfig) -> aiohttp.ClientSession:
    """Create a session with one pooled connection per worker."""
    connector = aiohttp.TCPConnector(
        limit=config.thread_count, limit_per_host=config.thread_count
    )
    return aiohttp.ClientSession(
        connector=connector, headers={"User-Agent": USER_AGENT}
    )


class LoadTester:
    """
    Closed-loop load generator for a single HTTP target.

    Starts ``thread_count`` workers that each send their next request as soon
    as the previous one completes, for ``duration_seconds``. A separate task
    pushes progress snapshots to ``progress_sink`` every 100ms.

    Collaborators:
    - recorder: where results are collected (reset at the start of each run)
    - session_factory: builds the aiohttp session used as the transport
    - progress_sink: callable or coroutine function receiving ProgressSnapshot
      objects. It is never waited on while the test runs; plain callables
      are called from a background thread.
    """

    def __init__(
        self,
        config: LoadTestConfig,
        recorder: Optional[ResultRecorder] = None,
        progress_sink: Optional[ProgressSink] = None,
        session_factory: Optional[SessionFactory] = None,
        retry_policy: Optional[RetryPolicy] = None,
        progress_interval: float = PROGRESS_INTERVAL_SECONDS,
    ):
        self.config = config
        self.recorder = recorder or ResultRecorder()
        self.progress_sink = progress_sink
        self.session_factory = session_factory or default_session_factory
        self.retry_policy = retry_policy
        self.progress_interval = progress_interval
        self.state = LoadTestState.IDLE
        self._sink_tasks: Set[asyncio.Future] = set()
        self._sink_executor: Optional[ThreadPoolExecutor] = None

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    async def run(self, cancel_token: Optional[CancellationToken] = None) -> LoadTestResult:
        """
        Run the load test until the configured duration elapses or
        ``cancel_token`` is cancelled.

        Returns:
            LoadTestResult whose outcome is CANCELLED when the token fired
            before the deadline, COMPLETED otherwise

        Raises:
            ConfigurationError: If the configuration is invalid
            RuntimeError: If this tester is already running
        """
        if self.state in (LoadTestState.RUNNING, LoadTestState.DRAINING):
            raise RuntimeError("Load test is already running")

        errors = self.config.validate()
        if errors:
            raise ConfigurationError(errors)

        executor = RequestExecutor(self.config, self.retry_policy)
        duration = self.config.duration_seconds

        self.recorder.reset()
        self.state = LoadTestState.RUNNING
        self._sink_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="apipulse-progress"
        )

        self.logger.info("Starting load test:")
        self.logger.info(f"  Target: {self.config.method} {executor.target_url}")
        self.logger.info(
            f"  {self.config.thread_count} workers for {duration} seconds"
        )

        try:
            return await self._run(executor, cancel_token)
        except BaseException:
            self.state = LoadTestState.IDLE
            raise
        finally:
            # Snapshots still queued behind a slow sink are dropped
            self._sink_executor.shutdown(wait=False, cancel_futures=True)
            self._sink_executor = None

    async def _run(
        self, executor: RequestExecutor, cancel_token: Optional[CancellationToken]
    ) -> LoadTestResult:
        duration = self.config.duration_seconds

        async with self.session_factory(self.config) as session:
            start_time = time.time()
            started = time.monotonic()
            signal = DeadlineSignal(started + duration, cancel_token)

            progress_task = asyncio.create_task(self._report_progress(signal, started))
            workers = [
                asyncio.create_task(self._worker(executor, session, signal))
                for _ in range(self.config.thread_count)
            ]
            tasks: List[asyncio.Task] = [progress_task] + workers

            try:
                await signal.wait()
                self.state = LoadTestState.DRAINING
                self.logger.info("Waiting for in-flight requests to complete...")
                await asyncio.gather(*workers)
                await progress_task
            finally:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

            end_time = time.time()
            elapsed = time.monotonic() - started

        self._emit(self._snapshot(elapsed))
        await self._flush_sinks()

        results = self.recorder.results()
        statistics = build_statistics(self.config, results, start_time, end_time)
        chart_data = build_chart_data(results, start_time)
        self.state = LoadTestState.COMPLETED

        if signal.cancelled_early:
            outcome = RunOutcome.CANCELLED
            self.logger.warning(
                f"Load test cancelled after {elapsed:.1f}s "
                f"({statistics.total_requests} requests recorded)"
            )
        else:
            outcome = RunOutcome.COMPLETED
            self.logger.info(
                f"Load test completed: {statistics.total_requests} requests "
                f"in {elapsed:.1f}s"
            )

        return LoadTestResult(
            statistics=statistics, chart_data=chart_data, outcome=outcome
        )

    async def _worker(
        self,
        executor: RequestExecutor,
        session: aiohttp.ClientSession,
        signal: DeadlineSignal,
    ):
        """Send requests back to back until the signal fires."""
        while not signal.fired:
            result = await executor.execute(session)
            self.recorder.record(result)

    async def _report_progress(self, signal: DeadlineSignal, started: float):
        """Emit a snapshot every ``progress_interval`` seconds while running."""
        while not signal.fired:
            try:
                await asyncio.wait_for(signal.wait(), timeout=self.progress_interval)
            except asyncio.TimeoutError:
                self._emit(self._snapshot(time.monotonic() - started))

    def _snapshot(self, elapsed: float) -> ProgressSnapshot:
        total, success, failure = self.recorder.counts()
        return ProgressSnapshot(
            elapsed_seconds=min(elapsed, self.config.duration_seconds),
            total_requests=total,
            success_count=success,
            failure_count=failure,
        )

    def _emit(self, snapshot: ProgressSnapshot) -> None:
        """
        Hand a snapshot to the sink without waiting for it.

        Coroutine sinks are scheduled on the loop. Plain callables run on a
        single background thread, so snapshots arrive in order and a slow
        sink never stalls the workers.
        """
        if self.progress_sink is None:
            return

        if _is_async_callable(self.progress_sink):
            try:
                pending = self.progress_sink(snapshot)
            except Exception as e:
                self.logger.warning(f"Progress sink failed: {e}")
                return
            self._track(asyncio.ensure_future(pending))
        else:
            loop = asyncio.get_running_loop()
            self._track(
                loop.run_in_executor(self._sink_executor, self.progress_sink, snapshot)
            )

    def _track(self, future: asyncio.Future) -> None:
        self._sink_tasks.add(future)
        future.add_done_callback(self._sink_done)

    def _sink_done(self, future: asyncio.Future) -> None:
        self._sink_tasks.discard(future)
        if future.cancelled():
            return
        if future.exception() is not None:
            self.logger.warning(f"Progress sink failed: {future.exception()}")
            return

        # A plain callable may still hand back an awaitable
        result = future.result()
        if inspect.isawaitable(result):
            self._track(asyncio.ensure_future(result))

    async def _flush_sinks(self) -> None:
        """Give outstanding sink calls a short window to finish."""
        if self._sink_tasks:
            await asyncio.wait(set(self._sink_tasks), timeout=SINK_FLUSH_SECONDS)


def _is_async_callable(func: Callable) -> bool:
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
        getattr(func, "__call__", None)
    )
