"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import HealthLabel, SeverityTier, StatusLabel
from models.thresholds import Quantity


class ChartSeries(BaseModel):
    """One plotted line: the live measurement or a constant threshold."""

    label: str
    data: List[float]
    border_color: str
    border_dash: Optional[List[int]] = None
    point_radius: Optional[int] = None
    fill: bool = False


class ChartPayload(BaseModel):
    """Chart data for one tracked quantity, keyed by the time labels."""

    quantity: Quantity
    labels: List[str]
    datasets: List[ChartSeries]


class LatestReadings(BaseModel):
    voltage: str = Field(..., description="Latest voltage, 2 decimals or a placeholder.")
    current: str
    power: str


class HealthView(BaseModel):
    score: str = Field(..., description="Integer percentage such as '87%'.")
    label: HealthLabel
    tier: SeverityTier


class StatusView(BaseModel):
    label: Optional[StatusLabel] = None
    css_class: Optional[str] = None
    description: str


class AnalyticsView(BaseModel):
    min_voltage: str
    max_voltage: str
    avg_voltage: str
    avg_current: str
    peak_power: str


class DashboardView(BaseModel):
    """Formatted dashboard fields consumed by the UI and the CLI."""

    sequence: int = Field(..., ge=0, description="Load sequence that produced this view.")
    loaded_at: Optional[datetime] = None
    source: Optional[str] = None
    row_count: int = Field(..., ge=0)
    latest: LatestReadings
    health: HealthView
    status: StatusView
    analytics: AnalyticsView


class ReloadResponse(BaseModel):
    """Outcome of a reload request."""

    sequence: int = Field(..., ge=1)
    applied: bool = Field(
        ..., description="False when a newer load superseded this one."
    )
    row_count: int = Field(..., ge=0)
