"""Range-rule anomaly detection for price, quantity and rating."""

import math
from collections.abc import Callable, Sequence

from src.core.schemas import AnalysisAnomalies, Anomaly, AnomalyReason
from src.processing.parsers import Row

# Header is spreadsheet row 1, so data row 0 sits on row 2.
FIRST_DATA_LINE = 2

Rule = tuple[Callable[[float], bool], AnomalyReason]

PRICE_RULES: tuple[Rule, ...] = (
    (lambda value: value < 0, AnomalyReason.negative_price),
    (lambda value: value < 10, AnomalyReason.price_below_10),
    (lambda value: value > 500, AnomalyReason.price_above_500),
)
QUANTITY_RULES: tuple[Rule, ...] = (
    (lambda value: value < 0, AnomalyReason.negative_quantity),
    (lambda value: value == 0, AnomalyReason.zero_quantity),
    (lambda value: value >= 1000, AnomalyReason.excessive_quantity),
)
RATING_RULES: tuple[Rule, ...] = (
    (lambda value: value < 1, AnomalyReason.rating_below_1),
    (lambda value: value > 5, AnomalyReason.rating_above_5),
)


def evaluate_rules(value: float, rules: Sequence[Rule]) -> AnomalyReason | None:
    """Return the reason of the first matching rule, or None.

    Rules are evaluated in order and stop at the first match, so later rules
    may assume earlier conditions are false. Non-numeric values are reported
    before any comparison runs.
    """
    if math.isnan(value):
        return AnomalyReason.unparseable_value
    for predicate, reason in rules:
        if predicate(value):
            return reason
    return None


def _check(value: float, rules: Sequence[Rule], line: int) -> Anomaly | None:
    reason = evaluate_rules(value, rules)
    if reason is None:
        return None
    return Anomaly(line=line, value=None if math.isnan(value) else value, reason=reason)


def detect_anomalies(rows: Sequence[Row]) -> AnalysisAnomalies:
    """Flag range violations per field, preserving row order."""
    price: list[Anomaly] = []
    quantity: list[Anomaly] = []
    rating: list[Anomaly] = []

    for index, row in enumerate(rows):
        line = index + FIRST_DATA_LINE
        for found, value, rules in (
            (price, row.price, PRICE_RULES),
            (quantity, row.quantity, QUANTITY_RULES),
            (rating, row.rating, RATING_RULES),
        ):
            anomaly = _check(value, rules, line)
            if anomaly is not None:
                found.append(anomaly)

    return AnalysisAnomalies(price=tuple(price), quantity=tuple(quantity), rating=tuple(rating))
