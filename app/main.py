from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.pipeline import DataLoadError, build_default_pipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    pipeline = build_default_pipeline()
    try:
        await pipeline.reload()
    except DataLoadError:
        logger.warning("Starting with an empty dashboard; initial load failed.")
    try:
        yield
    finally:
        build_default_pipeline.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Battery Health Monitor",
        description="Battery telemetry dashboard: statistics, health score, status and charts.",
        version="0.1.0",
        lifespan=lifespan,
    )
    static_dir = Path(__file__).resolve().parent.parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
