from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.pipeline import DashboardPipeline, build_default_pipeline
from services.presenter import build_dashboard_view


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_pipeline() -> DashboardPipeline:
    return build_default_pipeline()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    pipeline: DashboardPipeline = Depends(get_pipeline),
) -> HTMLResponse:
    snapshot = pipeline.snapshot
    charts = {
        quantity.value: payload.model_dump(mode="json")
        for quantity, payload in snapshot.charts.items()
    }
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "view": build_dashboard_view(snapshot),
            "charts": charts,
        },
    )
