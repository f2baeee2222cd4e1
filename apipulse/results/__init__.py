"""Result export and chart rendering."""

from .charts import generate_charts
from .exporter import ResultExporter, format_report, results_to_dataframe

__all__ = ["ResultExporter", "format_report", "generate_charts", "results_to_dataframe"]
