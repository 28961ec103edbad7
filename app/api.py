"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.schemas import ChartPayload, DashboardView, ReloadResponse
from models.thresholds import Quantity
from services.pipeline import DashboardPipeline, DataLoadError, build_default_pipeline
from services.presenter import build_dashboard_view

router = APIRouter()


def get_pipeline() -> DashboardPipeline:
    return build_default_pipeline()


@router.get(
    "/dashboard",
    response_model=DashboardView,
    summary="Formatted dashboard fields for the latest loaded dataset.",
)
async def get_dashboard(
    pipeline: DashboardPipeline = Depends(get_pipeline),
) -> DashboardView:
    return build_dashboard_view(pipeline.snapshot)


@router.post(
    "/dashboard/reload",
    response_model=ReloadResponse,
    summary="Reload the telemetry CSV and recompute everything.",
)
async def reload_dashboard(
    pipeline: DashboardPipeline = Depends(get_pipeline),
) -> ReloadResponse:
    try:
        outcome = await pipeline.reload()
    except DataLoadError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    return ReloadResponse(
        sequence=outcome.sequence,
        applied=outcome.applied,
        row_count=len(outcome.snapshot.dataset),
    )


@router.get(
    "/charts/{quantity}",
    response_model=ChartPayload,
    summary="Live series plus safe/warning/critical reference lines.",
)
async def get_chart(
    quantity: str,
    pipeline: DashboardPipeline = Depends(get_pipeline),
) -> ChartPayload:
    try:
        key = Quantity(quantity)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown chart {quantity!r}.",
        ) from exc
    return pipeline.snapshot.charts[key]


@router.get(
    "/dataset/download",
    summary="Download the exact CSV bytes behind the current dashboard.",
    response_class=Response,
)
async def download_dataset(
    pipeline: DashboardPipeline = Depends(get_pipeline),
) -> Response:
    snapshot = pipeline.snapshot
    if not snapshot.is_loaded:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No dataset has been loaded yet.",
        )
    return Response(
        content=snapshot.raw,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{snapshot.filename}"'},
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard."}
