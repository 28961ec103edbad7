"""Operational status of the pack from its latest reading."""

from __future__ import annotations

from typing import Optional, Sequence

from models.records import StatusAssessment, StatusLabel
from models.thresholds import STATUS_THRESHOLDS, StatusThresholds

CRITICAL_STATUS = StatusAssessment(
    label=StatusLabel.critical,
    css_class="status-critical",
    description="Voltage or current in unsafe region. Reduce load / disconnect pack.",
)
WARNING_STATUS = StatusAssessment(
    label=StatusLabel.warning,
    css_class="status-warning",
    description="Voltage dropping or current high. Monitor operating conditions.",
)
NORMAL_STATUS = StatusAssessment(
    label=StatusLabel.normal,
    css_class="status-normal",
    description="Battery operating within nominal voltage and current limits.",
)


class StatusClassifier:
    """First matching rule wins: critical, then warning, then normal."""

    def __init__(self, thresholds: StatusThresholds = STATUS_THRESHOLDS) -> None:
        self.thresholds = thresholds

    def classify(
        self, voltage: Sequence[float], current: Sequence[float]
    ) -> Optional[StatusAssessment]:
        """Classify the last element of each sequence; ``None`` when there is no data."""
        if not voltage or not current:
            return None
        return self.classify_reading(voltage[-1], current[-1])

    def classify_reading(self, voltage: float, current: float) -> StatusAssessment:
        limits = self.thresholds
        if voltage <= limits.critical_voltage or abs(current) >= limits.critical_current:
            return CRITICAL_STATUS
        if voltage < limits.min_safe_voltage or abs(current) >= limits.high_current:
            return WARNING_STATUS
        return NORMAL_STATUS
