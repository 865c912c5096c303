"""Assembly of analysis results and their notification summaries."""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from src.core.schemas import (
    AnalysisAnomalies,
    AnalysisResult,
    AnalysisStatistics,
    AnomalyCounts,
    MetricAverages,
    NotificationSummary,
)
from src.processing.anomalies import detect_anomalies
from src.processing.parsers import parse_rows
from src.processing.stats import compute_statistics


def assemble_result(
    statistics: AnalysisStatistics,
    anomalies: AnalysisAnomalies,
    total_records: int,
) -> AnalysisResult:
    return AnalysisResult(
        total_records=total_records,
        statistics=statistics,
        anomalies=anomalies,
    )


def analyze(payload: bytes | str) -> AnalysisResult:
    """Parse a product CSV payload and compute its statistics and anomalies.

    Raises ``InvalidDatasetFormatError`` when the CSV structure is malformed;
    every other data problem is reported inside the result.
    """
    rows = parse_rows(payload)
    return assemble_result(
        statistics=compute_statistics(rows),
        anomalies=detect_anomalies(rows),
        total_records=len(rows),
    )


def load_result(payload: Mapping[str, Any]) -> AnalysisResult:
    """Validate a stored or client-supplied result, zero-filling absent sections."""
    return AnalysisResult.model_validate(dict(payload))


def build_notification_summary(
    result: AnalysisResult,
    file_name: str,
    timestamp: datetime | None = None,
) -> NotificationSummary:
    anomalies = result.anomalies
    statistics = result.statistics
    return NotificationSummary(
        file_name=file_name,
        timestamp=timestamp or datetime.now(UTC),
        total_records=result.total_records,
        anomaly_counts=AnomalyCounts(
            price=len(anomalies.price),
            quantity=len(anomalies.quantity),
            rating=len(anomalies.rating),
            total=anomalies.total,
        ),
        averages=MetricAverages(
            price=statistics.price.mean,
            quantity=statistics.quantity.mean,
            rating=statistics.rating.mean,
        ),
    )
