"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(slots=True)
class Reading:
    """A single telemetry sample parsed from the CSV."""

    label: str
    voltage: float
    current: float
    power: float


@dataclass(frozen=True)
class Dataset:
    """Four aligned sequences in file order. The last row is the latest reading."""

    time: Tuple[str, ...] = ()
    voltage: Tuple[float, ...] = ()
    current: Tuple[float, ...] = ()
    power: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        lengths = {len(self.time), len(self.voltage), len(self.current), len(self.power)}
        if len(lengths) != 1:
            raise ValueError(
                "Dataset sequences must share one length, got "
                f"time={len(self.time)} voltage={len(self.voltage)} "
                f"current={len(self.current)} power={len(self.power)}"
            )

    @classmethod
    def from_readings(cls, readings: Iterable[Reading]) -> "Dataset":
        rows = list(readings)
        return cls(
            time=tuple(row.label for row in rows),
            voltage=tuple(row.voltage for row in rows),
            current=tuple(row.current for row in rows),
            power=tuple(row.power for row in rows),
        )

    def __len__(self) -> int:
        return len(self.time)

    def readings(self) -> Iterator[Reading]:
        for label, voltage, current, power in zip(
            self.time, self.voltage, self.current, self.power
        ):
            yield Reading(label=label, voltage=voltage, current=current, power=power)

    def latest(self) -> Optional[Reading]:
        if not self.time:
            return None
        return Reading(
            label=self.time[-1],
            voltage=self.voltage[-1],
            current=self.current[-1],
            power=self.power[-1],
        )


class HealthLabel(str, Enum):
    healthy = "Healthy"
    warning = "Warning"
    critical = "Critical"


class SeverityTier(str, Enum):
    """Visual tier used to colour the health pill."""

    good = "good"
    warn = "warn"
    bad = "bad"


class StatusLabel(str, Enum):
    normal = "Normal"
    warning = "Warning"
    critical = "Critical"


@dataclass(frozen=True)
class HealthAssessment:
    score: float
    label: HealthLabel

    @property
    def tier(self) -> SeverityTier:
        # Compared on the score itself; a NaN score lands in the bad tier
        # even though its label falls through to Healthy.
        if self.score >= 80:
            return SeverityTier.good
        if self.score >= 50:
            return SeverityTier.warn
        return SeverityTier.bad


@dataclass(frozen=True)
class StatusAssessment:
    label: StatusLabel
    css_class: str
    description: str
