"""Processing helpers for parsing, statistics, and anomaly detection."""

from .anomalies import detect_anomalies
from .parsers import InvalidDatasetFormatError, parse_rows
from .results import analyze, assemble_result, build_notification_summary, load_result
from .stats import compute_statistics

__all__ = [
    "InvalidDatasetFormatError",
    "analyze",
    "assemble_result",
    "build_notification_summary",
    "compute_statistics",
    "detect_anomalies",
    "load_result",
    "parse_rows",
]
