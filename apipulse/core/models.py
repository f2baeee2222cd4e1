"""Data models for load testing."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from yarl import URL

from .exceptions import ConfigurationError

MIN_THREADS = 1
MAX_THREADS = 1000
MIN_DURATION = 1
MAX_DURATION = 3600

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
BODYLESS_METHODS = ("GET", "HEAD")

# Latency histogram buckets: (label, inclusive upper bound in ms)
LATENCY_BUCKETS = (
    ("0-100 ms", 100.0),
    ("100-300 ms", 300.0),
    ("300-500 ms", 500.0),
    ("500-1000 ms", 1000.0),
    (">1000 ms", None),
)


@dataclass(frozen=True)
class LoadTestConfig:
    """Configuration for a single load test run."""

    target_url: str
    thread_count: int
    duration_seconds: int

    # Per-request settings
    timeout_seconds: float = 15
    max_retries: int = 3
    method: str = "GET"

    # Optional request payload
    query_parameters: Optional[Dict[str, str]] = None
    request_body: Optional[str] = None
    content_type: str = "application/json"

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        if self.query_parameters is not None:
            object.__setattr__(self, "query_parameters", dict(self.query_parameters))

    @classmethod
    def create(cls, **kwargs) -> "LoadTestConfig":
        """Build a configuration and raise ConfigurationError if it is invalid."""
        config = cls(**kwargs)
        errors = config.validate()
        if errors:
            raise ConfigurationError(errors)
        return config

    def validate(self) -> List[str]:
        """Return one message per violated constraint (empty when valid)."""
        errors = []

        try:
            url = URL(self.target_url)
        except (TypeError, ValueError):
            url = None
        if (
            url is None
            or not url.is_absolute()
            or url.scheme not in ("http", "https")
            or not url.host
        ):
            errors.append(
                f"Invalid URL '{self.target_url}': expected an absolute http(s) URL"
            )

        if not MIN_THREADS <= self.thread_count <= MAX_THREADS:
            errors.append(
                f"Thread count must be between {MIN_THREADS} and {MAX_THREADS} "
                f"(got {self.thread_count})"
            )
        if not MIN_DURATION <= self.duration_seconds <= MAX_DURATION:
            errors.append(
                f"Duration must be between {MIN_DURATION} and {MAX_DURATION} seconds "
                f"(got {self.duration_seconds})"
            )
        if self.timeout_seconds <= 0:
            errors.append(f"Timeout must be positive (got {self.timeout_seconds})")
        if self.max_retries < 0:
            errors.append(f"Max retries cannot be negative (got {self.max_retries})")
        if self.method not in SUPPORTED_METHODS:
            errors.append(
                f"Unsupported HTTP method '{self.method}' "
                f"(expected one of {', '.join(SUPPORTED_METHODS)})"
            )
        return errors

    @property
    def sends_body(self) -> bool:
        """Check if the request body should be attached to requests."""
        return bool(self.request_body) and self.method not in BODYLESS_METHODS

    @property
    def host(self) -> str:
        return URL(self.target_url).host or ""


@dataclass(frozen=True)
class RequestResult:
    """Outcome of a single completed request."""

    latency_ms: float
    success: bool
    status_code: int  # 0 for transport errors and timeouts
    timestamp: float  # epoch seconds at completion
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "latency_ms": self.latency_ms,
            "success": self.success,
            "status_code": self.status_code,
            "timestamp": self.timestamp,
            "error": self.error,
        }


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of a running test."""

    elapsed_seconds: float
    total_requests: int
    success_count: int
    failure_count: int


@dataclass(frozen=True)
class LoadTestStatistics:
    """Aggregate statistics for a finished load test."""

    # Test identification
    target_url: str
    host: str
    thread_count: int
    duration_seconds: int

    # Latency metrics (milliseconds)
    min_latency_ms: float
    max_latency_ms: float
    avg_latency_ms: float
    median_latency_ms: float
    p95_latency_ms: float

    # Request metrics
    total_requests: int
    successful_requests: int
    failed_requests: int

    # Throughput metrics
    requests_per_second: float
    success_rate: float

    # Timing metadata
    start_timestamp: datetime
    end_timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "target_url": self.target_url,
            "host": self.host,
            "thread_count": self.thread_count,
            "duration_seconds": self.duration_seconds,
            "min_latency_ms": self.min_latency_ms,
            "max_latency_ms": self.max_latency_ms,
            "avg_latency_ms": self.avg_latency_ms,
            "median_latency_ms": self.median_latency_ms,
            "p95_latency_ms": self.p95_latency_ms,
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "requests_per_second": self.requests_per_second,
            "success_rate": self.success_rate,
            "start_timestamp": self.start_timestamp.isoformat(),
            "end_timestamp": self.end_timestamp.isoformat(),
        }


@dataclass(frozen=True)
class TimeSeriesPoint:
    """A single per-second chart point."""

    second_offset: int
    value: float


@dataclass(frozen=True)
class ChartData:
    """Chart-ready series derived from a test's results."""

    response_time_series: List[TimeSeriesPoint] = field(default_factory=list)
    requests_per_second_series: List[TimeSeriesPoint] = field(default_factory=list)
    status_code_distribution: Dict[int, int] = field(default_factory=dict)
    response_time_distribution: Dict[str, int] = field(default_factory=dict)


class RunOutcome(Enum):
    """How a load test run ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LoadTestResult:
    """Everything a finished run produces."""

    statistics: LoadTestStatistics
    chart_data: ChartData
    outcome: RunOutcome = RunOutcome.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.outcome is RunOutcome.CANCELLED
