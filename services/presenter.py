"""Formats a snapshot into the fields the dashboard displays."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional

from app.schemas import (
    AnalyticsView,
    DashboardView,
    HealthView,
    LatestReadings,
    StatusView,
)
from services.pipeline import DashboardSnapshot

PLACEHOLDER = "--"

_EXPONENT_FORM_FROM = 1e21


def format_fixed(value: Optional[float], digits: int = 2) -> str:
    """Fixed-point text, rounding half away from zero on the exact float value.

    Magnitudes of 1e21 and above switch to exponent form (``1e+30``), as a
    browser's ``toFixed`` does.
    """
    if value is None:
        return PLACEHOLDER
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if abs(value) >= _EXPONENT_FORM_FROM:
        return repr(value)
    quantum = Decimal(1).scaleb(-digits)
    # Below 1e21 the integer part has at most 21 digits.
    context = Context(prec=21 + digits + 2)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=context))


def format_with_unit(value: Optional[float], unit: str) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{format_fixed(value)} {unit}"


def build_dashboard_view(snapshot: DashboardSnapshot) -> DashboardView:
    latest = snapshot.dataset.latest()
    summary = snapshot.summary
    health = snapshot.health
    status = snapshot.status

    if status is None:
        status_view = StatusView(description=PLACEHOLDER)
    else:
        status_view = StatusView(
            label=status.label,
            css_class=status.css_class,
            description=status.description,
        )

    return DashboardView(
        sequence=snapshot.sequence,
        loaded_at=snapshot.loaded_at,
        source=snapshot.source,
        row_count=summary.row_count,
        latest=LatestReadings(
            voltage=format_fixed(latest.voltage if latest else None),
            current=format_fixed(latest.current if latest else None),
            power=format_fixed(latest.power if latest else None),
        ),
        health=HealthView(
            score=f"{format_fixed(health.score, 0)}%",
            label=health.label,
            tier=health.tier,
        ),
        status=status_view,
        analytics=AnalyticsView(
            min_voltage=format_with_unit(summary.min_voltage, "V"),
            max_voltage=format_with_unit(summary.max_voltage, "V"),
            avg_voltage=format_with_unit(summary.avg_voltage, "V"),
            avg_current=format_with_unit(summary.avg_current, "A"),
            peak_power=format_with_unit(summary.peak_power, "W"),
        ),
    )
