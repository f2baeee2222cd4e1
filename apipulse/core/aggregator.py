"""Statistics and chart-data aggregation over recorded results."""

import math
import statistics
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List, Sequence

from .models import (
    LATENCY_BUCKETS,
    ChartData,
    LoadTestConfig,
    LoadTestStatistics,
    RequestResult,
    TimeSeriesPoint,
)


def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """
    Calculate a percentile with linear interpolation between closest ranks.

    Args:
        sorted_values: Values in ascending order
        percentile: Percentile in the range 0-100

    Returns:
        The interpolated percentile value, or 0.0 for an empty sequence
    """
    if not sorted_values:
        return 0.0

    index = (percentile / 100.0) * (len(sorted_values) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)

    if lower == upper:
        return float(sorted_values[lower])

    fraction = index - lower
    return sorted_values[lower] + (sorted_values[upper] - sorted_values[lower]) * fraction


def build_statistics(
    config: LoadTestConfig,
    results: List[RequestResult],
    start_time: float,
    end_time: float,
) -> LoadTestStatistics:
    """Calculate summary statistics from collected results."""
    start_datetime = datetime.fromtimestamp(start_time)
    end_datetime = datetime.fromtimestamp(end_time)

    if not results:
        return LoadTestStatistics(
            target_url=config.target_url,
            host=config.host,
            thread_count=config.thread_count,
            duration_seconds=config.duration_seconds,
            min_latency_ms=0.0,
            max_latency_ms=0.0,
            avg_latency_ms=0.0,
            median_latency_ms=0.0,
            p95_latency_ms=0.0,
            total_requests=0,
            successful_requests=0,
            failed_requests=0,
            requests_per_second=0.0,
            success_rate=0.0,
            start_timestamp=start_datetime,
            end_timestamp=end_datetime,
        )

    total_requests = len(results)
    successful_requests = sum(1 for r in results if r.success)
    failed_requests = total_requests - successful_requests

    latencies = sorted(r.latency_ms for r in results)

    # Actual elapsed wall time, not the configured duration
    actual_duration = end_time - start_time
    throughput = total_requests / actual_duration if actual_duration > 0 else 0.0

    return LoadTestStatistics(
        target_url=config.target_url,
        host=config.host,
        thread_count=config.thread_count,
        duration_seconds=config.duration_seconds,
        min_latency_ms=latencies[0],
        max_latency_ms=latencies[-1],
        avg_latency_ms=statistics.mean(latencies),
        median_latency_ms=calculate_percentile(latencies, 50),
        p95_latency_ms=calculate_percentile(latencies, 95),
        total_requests=total_requests,
        successful_requests=successful_requests,
        failed_requests=failed_requests,
        requests_per_second=throughput,
        success_rate=successful_requests / total_requests * 100,
        start_timestamp=start_datetime,
        end_timestamp=end_datetime,
    )


def _latency_bucket(latency_ms: float) -> str:
    for label, upper in LATENCY_BUCKETS[:-1]:
        if latency_ms <= upper:
            return label
    return LATENCY_BUCKETS[-1][0]


def build_chart_data(results: List[RequestResult], start_time: float) -> ChartData:
    """
    Build chart-ready series from collected results.

    Results are grouped by whole seconds since ``start_time``. Seconds with
    no results are absent from the series rather than zero-filled.
    """
    per_second: Dict[int, List[float]] = defaultdict(list)
    for r in results:
        per_second[math.floor(r.timestamp - start_time)].append(r.latency_ms)

    offsets = sorted(per_second)
    response_time_series = [
        TimeSeriesPoint(offset, statistics.mean(per_second[offset]))
        for offset in offsets
    ]
    requests_per_second_series = [
        TimeSeriesPoint(offset, float(len(per_second[offset]))) for offset in offsets
    ]

    status_codes = Counter(r.status_code for r in results)

    distribution = {label: 0 for label, _ in LATENCY_BUCKETS}
    for r in results:
        distribution[_latency_bucket(r.latency_ms)] += 1

    return ChartData(
        response_time_series=response_time_series,
        requests_per_second_series=requests_per_second_series,
        status_code_distribution=dict(status_codes),
        response_time_distribution=distribution,
    )
