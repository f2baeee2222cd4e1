"""Chart generation for load test results."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List

import matplotlib.pyplot as plt

from ..core.models import ChartData, LoadTestStatistics

BUCKET_COLORS = ["green", "limegreen", "gold", "orange", "red"]

logger = logging.getLogger(__name__)


def status_color(status_code: int) -> str:
    """Pick a bar color for an HTTP status code."""
    if 200 <= status_code < 300:
        return "green"
    if 300 <= status_code < 400:
        return "gold"
    if 400 <= status_code < 500:
        return "orange"
    if status_code >= 500:
        return "red"
    return "gray"


def _save(fig, path: Path) -> str:
    fig.tight_layout()
    fig.savefig(path, dpi=100, bbox_inches="tight")
    plt.close(fig)
    return str(path)


def _plot_series(points, title: str, y_label: str, color: str, legend: str, path: Path) -> str:
    fig, ax = plt.subplots(figsize=(8, 5))
    if points:
        x_values = [p.second_offset for p in points]
        y_values = [p.value for p in points]
        ax.plot(x_values, y_values, color=color, marker="o", linewidth=2, markersize=5, label=legend)
        ax.legend()
    ax.set_xlabel("Time (seconds)")
    ax.set_ylabel(y_label)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.set_ylim(bottom=0)
    return _save(fig, path)


def _plot_bars(labels: List[str], values: List[int], colors: List[str], title: str, path: Path) -> str:
    fig, ax = plt.subplots(figsize=(8, 5))
    positions = range(len(labels))
    ax.bar(positions, values, color=colors, alpha=0.8)
    ax.set_xticks(list(positions))
    ax.set_xticklabels(labels, rotation=15)
    ax.set_ylabel("Requests")
    ax.set_title(title)
    ax.grid(True, alpha=0.3, axis="y")

    for i, v in enumerate(values):
        ax.annotate(str(v), (i, v), textcoords="offset points", xytext=(0, 3), ha="center", fontsize=9)

    return _save(fig, path)


def generate_charts(
    chart_data: ChartData,
    stats: LoadTestStatistics,
    output_dir: str = ".",
) -> List[str]:
    """
    Render PNG charts for a single load test.

    Args:
        chart_data: Series and distributions computed for the test
        stats: Statistics of the same test (used for chart titles)
        output_dir: Directory for the PNG files (created if missing)

    Returns:
        Paths of the saved chart files
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    saved = [
        _plot_series(
            chart_data.response_time_series,
            f"Response Time - {stats.host}",
            "Response time (ms)",
            "navy",
            "Average response time",
            directory / f"ApiPulse_ResponseTime_{timestamp}.png",
        ),
        _plot_series(
            chart_data.requests_per_second_series,
            f"Throughput - {stats.host}",
            "Requests per second",
            "green",
            "Requests/sec",
            directory / f"ApiPulse_RequestsPerSecond_{timestamp}.png",
        ),
    ]

    distribution = chart_data.response_time_distribution
    saved.append(
        _plot_bars(
            list(distribution.keys()),
            list(distribution.values()),
            BUCKET_COLORS[: len(distribution)],
            f"Response Time Distribution - {stats.host}",
            directory / f"ApiPulse_ResponseTimeDistribution_{timestamp}.png",
        )
    )

    if chart_data.status_code_distribution:
        codes = sorted(chart_data.status_code_distribution)
        saved.append(
            _plot_bars(
                [str(code) for code in codes],
                [chart_data.status_code_distribution[code] for code in codes],
                [status_color(code) for code in codes],
                f"HTTP Status Codes - {stats.host}",
                directory / f"ApiPulse_StatusCodes_{timestamp}.png",
            )
        )

    for path in saved:
        logger.debug(f"Chart saved as: {path}")
    return saved
