"""Load orchestration: fetch, parse, derive, swap the published snapshot."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from threading import Lock
from typing import Mapping, Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from app.schemas import ChartPayload
from models.records import Dataset, HealthAssessment, StatusAssessment
from models.thresholds import Quantity
from services.aggregator import Aggregator, AnalyticsSummary
from services.charts import ChartBuilder
from services.health import HealthScorer
from services.parser import parse_dataset
from services.status import StatusClassifier
from storage.telemetry_source import TelemetrySource, build_default_source

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Could not load battery data. Please ensure the CSV is available."


class DataLoadError(RuntimeError):
    """The telemetry CSV could not be fetched or decoded."""


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything derived from one load. Replaced wholesale, never mutated."""

    sequence: int
    dataset: Dataset
    summary: AnalyticsSummary
    health: HealthAssessment
    status: Optional[StatusAssessment]
    charts: Mapping[Quantity, ChartPayload]
    raw: bytes = b""
    source: Optional[str] = None
    filename: Optional[str] = None
    loaded_at: Optional[datetime] = None

    @property
    def is_loaded(self) -> bool:
        return self.sequence > 0


@dataclass(frozen=True)
class LoadOutcome:
    sequence: int
    applied: bool
    snapshot: DashboardSnapshot = field(repr=False)


class DashboardPipeline:
    """Runs the telemetry pipeline and publishes the newest snapshot."""

    def __init__(
        self,
        source: TelemetrySource,
        aggregator: Optional[Aggregator] = None,
        scorer: Optional[HealthScorer] = None,
        classifier: Optional[StatusClassifier] = None,
        charts: Optional[ChartBuilder] = None,
    ) -> None:
        self.source = source
        self.aggregator = aggregator or Aggregator()
        self.scorer = scorer or HealthScorer()
        self.classifier = classifier or StatusClassifier()
        self.charts = charts or ChartBuilder()
        self._lock = Lock()
        self._issued = 0
        self._snapshot = self.derive(Dataset(), sequence=0)

    @property
    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            return self._snapshot

    def derive(
        self,
        dataset: Dataset,
        sequence: int,
        raw: bytes = b"",
        loaded_at: Optional[datetime] = None,
    ) -> DashboardSnapshot:
        """Compute every derived view of ``dataset`` synchronously."""
        return DashboardSnapshot(
            sequence=sequence,
            dataset=dataset,
            summary=self.aggregator.summarize(dataset),
            health=self.scorer.score(dataset.voltage, dataset.current),
            status=self.classifier.classify(dataset.voltage, dataset.current),
            charts=self.charts.build_all(dataset),
            raw=raw,
            source=self.source.location if sequence else None,
            filename=self.source.filename if sequence else None,
            loaded_at=loaded_at,
        )

    def process(self, raw: bytes, sequence: int) -> DashboardSnapshot:
        text = raw.decode("utf-8-sig")
        return self.derive(
            parse_dataset(text),
            sequence=sequence,
            raw=raw,
            loaded_at=datetime.now(timezone.utc),
        )

    async def reload(self) -> LoadOutcome:
        """Fetch the source and publish the result if no newer load was issued.

        Raises :class:`DataLoadError` when the source cannot be read; the
        published snapshot is left untouched in that case.
        """
        with self._lock:
            self._issued += 1
            sequence = self._issued

        start_time = time.perf_counter()
        context = {"source": self.source.location, "load_seq": sequence}
        logger.debug("Loading telemetry", extra=context)

        try:
            raw = await run_in_threadpool(self.source.read_bytes)
            snapshot = self.process(raw, sequence)
        except (OSError, UnicodeDecodeError, httpx.HTTPError) as exc:
            logger.exception(
                "Error loading telemetry CSV", extra={**context, "reason": str(exc)}
            )
            raise DataLoadError(LOAD_FAILED_MESSAGE) from exc

        processing_ms = int((time.perf_counter() - start_time) * 1000)
        with self._lock:
            if sequence != self._issued:
                current = self._snapshot
                applied = False
            else:
                self._snapshot = snapshot
                current = snapshot
                applied = True

        if not applied:
            logger.info(
                "Discarding superseded telemetry load",
                extra={**context, "processing_ms": processing_ms},
            )
            return LoadOutcome(sequence=sequence, applied=False, snapshot=current)

        logger.info(
            "Loaded telemetry",
            extra={
                **context,
                "row_count": len(snapshot.dataset),
                "health_score": round(snapshot.health.score, 1),
                "status": snapshot.status.label.value if snapshot.status else None,
                "processing_ms": processing_ms,
            },
        )
        return LoadOutcome(sequence=sequence, applied=True, snapshot=snapshot)


@lru_cache
def build_default_pipeline() -> DashboardPipeline:
    """Factory that wires the pipeline to the configured CSV source."""
    return DashboardPipeline(source=build_default_source())
