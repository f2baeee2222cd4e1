"""Core load testing components."""

from .cancellation import CancellationToken, DeadlineSignal
from .exceptions import ApiPulseError, ConfigurationError, ExportError
from .executor import RequestExecutor, RetryPolicy
from .load_tester import LoadTester, LoadTestState
from .models import (
    ChartData,
    LoadTestConfig,
    LoadTestResult,
    LoadTestStatistics,
    ProgressSnapshot,
    RequestResult,
    RunOutcome,
    TimeSeriesPoint,
)
from .recorder import ResultRecorder

__all__ = [
    "ApiPulseError",
    "CancellationToken",
    "ChartData",
    "ConfigurationError",
    "DeadlineSignal",
    "ExportError",
    "LoadTestConfig",
    "LoadTestResult",
    "LoadTestState",
    "LoadTestStatistics",
    "LoadTester",
    "ProgressSnapshot",
    "RequestExecutor",
    "RequestResult",
    "ResultRecorder",
    "RetryPolicy",
    "RunOutcome",
    "TimeSeriesPoint",
]
