"""Aggregation logic for telemetry sequences."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from models.records import Dataset


def average(values: Sequence[float]) -> float:
    """Arithmetic mean, or 0 for an empty sequence."""
    if not values:
        return 0.0
    total = 0.0
    for value in values:
        total += value
    return total / len(values)


def _extreme(values: Sequence[float], pick) -> Optional[float]:
    if not values:
        return None
    result = values[0]
    for value in values:
        if math.isnan(value):
            return math.nan
        result = pick(result, value)
    return result


def minimum(values: Sequence[float]) -> Optional[float]:
    """Smallest value; ``None`` when empty and NaN if any element is NaN."""
    return _extreme(values, min)


def maximum(values: Sequence[float]) -> Optional[float]:
    """Largest value; ``None`` when empty and NaN if any element is NaN."""
    return _extreme(values, max)


def standard_deviation(values: Sequence[float]) -> float:
    """Population (N, not N-1) standard deviation."""
    mean = average(values)
    return math.sqrt(average([(value - mean) ** 2 for value in values]))


@dataclass(frozen=True)
class AnalyticsSummary:
    """Computed statistics for one loaded dataset."""

    row_count: int = 0
    min_voltage: Optional[float] = None
    max_voltage: Optional[float] = None
    avg_voltage: float = 0.0
    avg_current: float = 0.0
    peak_power: Optional[float] = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def summarize(self, dataset: Dataset) -> AnalyticsSummary:
        return AnalyticsSummary(
            row_count=len(dataset),
            min_voltage=minimum(dataset.voltage),
            max_voltage=maximum(dataset.voltage),
            avg_voltage=average(dataset.voltage),
            avg_current=average(dataset.current),
            peak_power=maximum(dataset.power),
        )
