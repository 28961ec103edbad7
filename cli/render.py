from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_STATUS_COLORS = {
    "Normal": typer.colors.GREEN,
    "Warning": typer.colors.YELLOW,
    "Critical": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_dashboard(payload: Dict[str, Any]) -> None:
    echo_heading("Dashboard")
    echo_key_values(
        [
            ("source", payload.get("source") or "--"),
            ("sequence", payload.get("sequence")),
            ("loaded_at", payload.get("loaded_at") or "--"),
            ("row_count", payload.get("row_count")),
        ]
    )

    latest = payload.get("latest") or {}
    typer.echo()
    echo_heading("Latest Reading")
    echo_key_values(
        [
            ("voltage", f"{latest.get('voltage', '--')} V"),
            ("current", f"{latest.get('current', '--')} A"),
            ("power", f"{latest.get('power', '--')} W"),
        ]
    )

    health = payload.get("health") or {}
    status = payload.get("status") or {}
    typer.echo()
    echo_heading("Health & Status")
    echo_key_values(
        [
            ("health_score", health.get("score")),
            ("health_label", health.get("label")),
        ]
    )
    label = status.get("label") or "--"
    typer.secho(f"status: {label}", fg=_STATUS_COLORS.get(label))
    typer.echo(f"  {status.get('description', '--')}")

    analytics = payload.get("analytics") or {}
    typer.echo()
    echo_heading("Analytics Summary")
    echo_key_values(
        [
            ("min_voltage", analytics.get("min_voltage")),
            ("max_voltage", analytics.get("max_voltage")),
            ("avg_voltage", analytics.get("avg_voltage")),
            ("avg_current", analytics.get("avg_current")),
            ("peak_power", analytics.get("peak_power")),
        ]
    )
