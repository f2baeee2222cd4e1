"""Result export and reporting."""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiofiles
import pandas as pd

from ..core.exceptions import ExportError
from ..core.models import LoadTestStatistics, RequestResult

REPORT_WIDTH = 60
SUMMARY_COLUMNS = [
    "Host", "Threads", "Duration_s", "Total", "Success", "Failed", "Success%",
    "Avg_ms", "Min_ms", "Max_ms", "Median_ms", "P95_ms", "RPS",
]


def results_to_dataframe(results: List[RequestResult]) -> pd.DataFrame:
    """Convert raw request results to a DataFrame, one row per request."""
    return pd.DataFrame(
        [r.to_dict() for r in results],
        columns=["latency_ms", "success", "status_code", "timestamp", "error"],
    )


def format_report(stats: LoadTestStatistics) -> str:
    """Render statistics as the plain-text report written to disk."""
    rule = "=" * REPORT_WIDTH
    thin_rule = "-" * REPORT_WIDTH
    lines = [
        rule,
        "API PULSE - LOAD TEST RESULTS".center(REPORT_WIDTH).rstrip(),
        rule,
        "",
        f"Test date:        {stats.start_timestamp:%Y-%m-%d %H:%M:%S}",
        f"Target URL:       {stats.target_url}",
        f"Threads:          {stats.thread_count}",
        f"Duration:         {stats.duration_seconds} s",
        "",
        thin_rule,
        "RESPONSE TIME",
        thin_rule,
        f"Minimum:          {stats.min_latency_ms:.2f} ms",
        f"Maximum:          {stats.max_latency_ms:.2f} ms",
        f"Average:          {stats.avg_latency_ms:.2f} ms",
        f"Median:           {stats.median_latency_ms:.2f} ms",
        f"95th Percentile:  {stats.p95_latency_ms:.2f} ms",
        "",
        thin_rule,
        "REQUEST STATISTICS",
        thin_rule,
        f"Total Requests:   {stats.total_requests}",
        f"Successful:       {stats.successful_requests}",
        f"Failed:           {stats.failed_requests}",
        f"Success Rate:     {stats.success_rate:.2f}%",
        f"Throughput:       {stats.requests_per_second:.2f} requests/second",
        "",
        rule,
    ]
    return "\n".join(lines) + "\n"


def resolve_report_path(path: Optional[str] = None) -> str:
    """
    Pick the report file name.

    A missing path gives a timestamped file in the working directory; an
    existing directory gets the timestamped file inside it.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    default_name = f"ApiPulse_Results_{timestamp}.txt"

    if not path or not path.strip():
        return default_name
    if os.path.isdir(path):
        return str(Path(path) / default_name)
    return path


class ResultExporter:
    """Collects test statistics and formats them for export."""

    def __init__(self):
        self.results: List[LoadTestStatistics] = []

    def add_result(self, result: LoadTestStatistics) -> None:
        self.results.append(result)

    async def export_text(
        self, stats: LoadTestStatistics, path: Optional[str] = None
    ) -> str:
        """
        Write a plain-text report for one test.

        Args:
            stats: Statistics to write
            path: Target file or directory (auto-generated name if None)

        Returns:
            Path of the written file

        Raises:
            ExportError: If the file cannot be written
        """
        filename = resolve_report_path(path)
        try:
            async with aiofiles.open(filename, "w", encoding="utf-8") as f:
                await f.write(format_report(stats))
        except OSError as e:
            raise ExportError(f"Could not write results to '{filename}': {e}") from e
        return filename

    def to_dataframe(self) -> pd.DataFrame:
        """One summary row per collected test."""
        rows = [
            {
                "Host": s.host,
                "Threads": s.thread_count,
                "Duration_s": s.duration_seconds,
                "Total": s.total_requests,
                "Success": s.successful_requests,
                "Failed": s.failed_requests,
                "Success%": round(s.success_rate, 2),
                "Avg_ms": round(s.avg_latency_ms, 2),
                "Min_ms": round(s.min_latency_ms, 2),
                "Max_ms": round(s.max_latency_ms, 2),
                "Median_ms": round(s.median_latency_ms, 2),
                "P95_ms": round(s.p95_latency_ms, 2),
                "RPS": round(s.requests_per_second, 2),
            }
            for s in self.results
        ]
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    def to_csv(self, path: str, sep: str = ",") -> None:
        """
        Write the summary table to ``path``.

        Raises:
            ExportError: If the file cannot be written
        """
        try:
            self.to_dataframe().to_csv(path, sep=sep, index=False)
        except OSError as e:
            raise ExportError(f"Could not write summary to '{path}': {e}") from e

    def to_tsv(self, path: str) -> None:
        self.to_csv(path, sep="\t")

    def get_tsv_string(self) -> str:
        """Summary table as TSV text, ready to paste into a spreadsheet."""
        return self.to_dataframe().to_csv(sep="\t", index=False)
