"""Fixed threshold constants.

Chart overlay limits and status classification limits are separate tables on
purpose. They are tuned for a single Li-Ion cell running around 3.8-3.9 V and
7 A, and do not share values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Quantity(str, Enum):
    voltage = "voltage"
    current = "current"
    power = "power"


@dataclass(frozen=True)
class ThresholdSet:
    safe: float
    warning: float
    critical: float


@dataclass(frozen=True)
class StatusThresholds:
    nominal_voltage: float = 3.9
    min_safe_voltage: float = 3.7
    critical_voltage: float = 3.5
    high_current: float = 9.5
    critical_current_factor: float = 1.5

    @property
    def critical_current(self) -> float:
        return self.high_current * self.critical_current_factor


CHART_THRESHOLDS: Mapping[Quantity, ThresholdSet] = MappingProxyType(
    {
        Quantity.voltage: ThresholdSet(safe=4.2, warning=3.7, critical=3.5),
        Quantity.current: ThresholdSet(safe=8.0, warning=9.5, critical=11.0),
        Quantity.power: ThresholdSet(safe=40.0, warning=50.0, critical=60.0),
    }
)

STATUS_THRESHOLDS = StatusThresholds()
