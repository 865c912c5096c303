"""Descriptive statistics for the numeric product fields."""

import math
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Context, Decimal

from src.core.schemas import AnalysisStatistics, MetricStats
from src.processing.parsers import Row

# wide enough for any finite double at 2 decimals
_ROUNDING = Context(prec=400, rounding=ROUND_HALF_UP)
_CENTS = Decimal("0.01")


def _is_number(value: float) -> bool:
    return not math.isnan(value)


def round_half_up(value: float) -> float:
    """Round to 2 decimals, sending exact halves away from zero."""
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(_CENTS, context=_ROUNDING))


def compute_metric_stats(values: Iterable[float]) -> MetricStats:
    """Compute rounded mean, median and population stddev over numeric values.

    NaN markers are dropped first. The median is the element at ``n // 2`` of
    the sorted values, so an even count yields the upper-middle element rather
    than the average of the two middle ones. The standard deviation divides by
    ``n`` and is measured against the already rounded mean.
    """
    numbers = [value for value in values if _is_number(value)]
    if not numbers:
        return MetricStats()

    count = len(numbers)
    mean = round_half_up(sum(numbers) / count)
    median = round_half_up(sorted(numbers)[count // 2])
    variance = sum((value - mean) ** 2 for value in numbers) / count
    return MetricStats(mean=mean, median=median, stddev=round_half_up(math.sqrt(variance)))


def compute_statistics(rows: Sequence[Row]) -> AnalysisStatistics:
    return AnalysisStatistics(
        price=compute_metric_stats(row.price for row in rows),
        quantity=compute_metric_stats(row.quantity for row in rows),
        rating=compute_metric_stats(row.rating for row in rows),
    )
