"""Chart datasets with constant threshold overlays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from app.schemas import ChartPayload, ChartSeries
from models.records import Dataset
from models.thresholds import CHART_THRESHOLDS, Quantity, ThresholdSet


@dataclass(frozen=True)
class _SeriesStyle:
    title: str
    unit: str
    color: str


_STYLES: Mapping[Quantity, _SeriesStyle] = {
    Quantity.voltage: _SeriesStyle(title="Voltage", unit="V", color="#00f2fe"),
    Quantity.current: _SeriesStyle(title="Current", unit="A", color="#1d8cf8"),
    Quantity.power: _SeriesStyle(title="Power", unit="W", color="#ff9f43"),
}

# (name, colour, dash) per overlay line, drawn in this order.
_LIMIT_STYLES = (
    ("Safe", "#2ecc71", [6, 4]),
    ("Warning", "#f1c40f", [4, 4]),
    ("Critical", "#e74c3c", [2, 4]),
)


class ChartBuilder:

    def __init__(self, thresholds: Mapping[Quantity, ThresholdSet] = CHART_THRESHOLDS) -> None:
        self.thresholds = thresholds

    def build(
        self, quantity: Quantity, labels: Sequence[str], values: Sequence[float]
    ) -> ChartPayload:
        style = _STYLES[quantity]
        limits = self.thresholds[quantity]
        levels = (limits.safe, limits.warning, limits.critical)

        datasets = [
            ChartSeries(
                label=f"{style.title} ({style.unit})",
                data=list(values),
                border_color=style.color,
            )
        ]
        for (name, color, dash), level in zip(_LIMIT_STYLES, levels):
            datasets.append(
                ChartSeries(
                    label=f"{name} {style.title} Limit",
                    data=[level] * len(labels),
                    border_color=color,
                    border_dash=list(dash),
                    point_radius=0,
                )
            )
        return ChartPayload(quantity=quantity, labels=list(labels), datasets=datasets)

    def build_all(self, dataset: Dataset) -> Dict[Quantity, ChartPayload]:
        series = {
            Quantity.voltage: dataset.voltage,
            Quantity.current: dataset.current,
            Quantity.power: dataset.power,
        }
        return {
            quantity: self.build(quantity, dataset.time, values)
            for quantity, values in series.items()
        }
