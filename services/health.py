"""Heuristic battery health score.

Lower voltage spread and lower current spread both mean a steadier pack.
Voltage stability dominates the blend.
"""

from __future__ import annotations

import math
from typing import Sequence

from models.records import HealthAssessment, HealthLabel
from services.aggregator import standard_deviation

VOLTAGE_SENSITIVITY = 8.0
CURRENT_SENSITIVITY = 10.0
VOLTAGE_WEIGHT = 0.6
CURRENT_WEIGHT = 0.4

CRITICAL_BELOW = 50.0
WARNING_BELOW = 80.0


def _floor_at_zero(value: float) -> float:
    # NaN must survive the clamp.
    if math.isnan(value):
        return value
    return max(0.0, value)


def clamp_score(value: float) -> float:
    if math.isnan(value):
        return value
    return max(0.0, min(100.0, value))


def health_label(score: float) -> HealthLabel:
    if score < CRITICAL_BELOW:
        return HealthLabel.critical
    if score < WARNING_BELOW:
        return HealthLabel.warning
    return HealthLabel.healthy


class HealthScorer:

    def score(self, voltage: Sequence[float], current: Sequence[float]) -> HealthAssessment:
        std_voltage = standard_deviation(voltage)
        std_current = standard_deviation(current)

        voltage_component = _floor_at_zero(100 - std_voltage * VOLTAGE_SENSITIVITY)
        current_component = _floor_at_zero(100 - std_current * CURRENT_SENSITIVITY)

        score = clamp_score(
            voltage_component * VOLTAGE_WEIGHT + current_component * CURRENT_WEIGHT
        )
        return HealthAssessment(score=score, label=health_label(score))
