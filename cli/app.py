from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_dashboard
from logging_config import configure_logging
from services.pipeline import DashboardPipeline, DataLoadError
from services.presenter import build_dashboard_view
from storage.telemetry_source import FileTelemetrySource


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for the battery health monitor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level for local pipeline runs (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level, force=log_level is not None)
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("analyze")
def analyze_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
) -> None:
    """Run the pipeline locally on a CSV file and print the dashboard."""
    pipeline = DashboardPipeline(source=FileTelemetrySource(file))
    try:
        outcome = asyncio.run(pipeline.reload())
    except DataLoadError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_dashboard(build_dashboard_view(outcome.snapshot).model_dump(mode="json"))


@app.command("summary")
def summary_command(ctx: typer.Context) -> None:
    """Fetch the dashboard from a running service."""
    state = _get_state(ctx)
    render_dashboard(state.client.get_dashboard())


@app.command("reload")
def reload_command(ctx: typer.Context) -> None:
    """Ask the service to reload its CSV and recompute everything."""
    state = _get_state(ctx)
    payload = state.client.reload()
    if payload.get("applied"):
        typer.secho(
            f"Reloaded (load #{payload.get('sequence')}, {payload.get('row_count')} rows).",
            fg=typer.colors.GREEN,
        )
    else:
        typer.secho(
            f"Load #{payload.get('sequence')} was superseded by a newer load.",
            fg=typer.colors.YELLOW,
        )


@app.command("download")
def download_command(
    ctx: typer.Context,
    output: Path = typer.Argument(..., dir_okay=False, help="Where to write the CSV."),
) -> None:
    """Save the CSV the dashboard is currently showing."""
    state = _get_state(ctx)
    content = state.client.download()
    output.write_bytes(content)
    typer.echo(f"Wrote {len(content)} bytes to {output}")
