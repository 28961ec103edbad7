import asyncio
import logging
import threading
import time
from pathlib import Path

import httpx
import pytest

from models.records import HealthLabel, StatusLabel
from models.thresholds import Quantity
from services.pipeline import DashboardPipeline, DataLoadError
from storage.telemetry_source import FileTelemetrySource, HttpTelemetrySource

SCENARIO_CSV = (
    "time,voltage,current,power\n"
    "t0,3.9,7.0,27.3\n"
    "t1,3.85,7.2,27.7\n"
    "t2,3.6,9.6,34.6\n"
)


class GatedSource:
    """Source whose Nth read blocks until ``gates[N]`` is set."""

    location = "gated.csv"
    filename = "gated.csv"

    def __init__(self, payloads: list[bytes]) -> None:
        self.payloads = payloads
        self.gates = [threading.Event() for _ in payloads]
        self.calls = 0
        self._lock = threading.Lock()

    def read_bytes(self) -> bytes:
        with self._lock:
            index = self.calls
            self.calls += 1
        if not self.gates[index].wait(timeout=5):
            raise AssertionError(f"read {index} was never released")
        return self.payloads[index]


async def _wait_for_calls(source: GatedSource, count: int, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while source.calls < count:
        if time.monotonic() > deadline:
            raise AssertionError(f"source saw {source.calls} reads, expected {count}")
        await asyncio.sleep(0.01)


def _write_csv(path: Path, body: str) -> Path:
    path.write_text(body)
    return path


def test_reload_runs_full_pipeline(tmp_path) -> None:
    path = _write_csv(tmp_path / "battery.csv", SCENARIO_CSV)
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))

    outcome = asyncio.run(pipeline.reload())

    assert outcome.applied is True
    assert outcome.sequence == 1
    snapshot = pipeline.snapshot
    assert snapshot is outcome.snapshot
    assert snapshot.is_loaded
    assert snapshot.dataset.time == ("t0", "t1", "t2")
    assert snapshot.summary.row_count == 3
    assert snapshot.health.label is HealthLabel.healthy
    assert set(snapshot.charts) == {Quantity.voltage, Quantity.current, Quantity.power}
    assert snapshot.source == str(path)
    assert snapshot.filename == "battery.csv"
    assert snapshot.loaded_at is not None


def test_scenario_latest_reading_is_warning_not_critical(tmp_path) -> None:
    path = _write_csv(tmp_path / "battery.csv", SCENARIO_CSV)
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))

    snapshot = asyncio.run(pipeline.reload()).snapshot

    latest = snapshot.dataset.latest()
    assert latest is not None
    assert latest.voltage == pytest.approx(3.6)
    assert latest.current == pytest.approx(9.6)
    assert snapshot.status is not None
    assert snapshot.status.label is StatusLabel.warning


def test_raw_bytes_are_kept_verbatim(tmp_path) -> None:
    body = "\ufefftime,voltage,current,power\r\n0,3.9,7.0,27.3\r\n"
    path = tmp_path / "battery.csv"
    path.write_bytes(body.encode("utf-8"))
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))

    snapshot = asyncio.run(pipeline.reload()).snapshot

    assert snapshot.raw == path.read_bytes()
    assert snapshot.dataset.time == ("0",)


def test_each_reload_replaces_the_snapshot(tmp_path) -> None:
    path = _write_csv(tmp_path / "battery.csv", SCENARIO_CSV)
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))
    first = asyncio.run(pipeline.reload()).snapshot

    path.write_text("time,voltage,current,power\nx,3.4,1.0,3.4\n")
    second = asyncio.run(pipeline.reload()).snapshot

    assert second is not first
    assert second.sequence == 2
    assert second.dataset.time == ("x",)
    assert second.status is not None and second.status.label is StatusLabel.critical
    assert first.dataset.time == ("t0", "t1", "t2")


def test_failed_load_keeps_previous_snapshot(tmp_path, caplog) -> None:
    path = _write_csv(tmp_path / "battery.csv", SCENARIO_CSV)
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))
    loaded = asyncio.run(pipeline.reload()).snapshot
    path.unlink()

    with caplog.at_level(logging.ERROR, logger="services.pipeline"):
        with pytest.raises(DataLoadError, match="Could not load battery data"):
            asyncio.run(pipeline.reload())

    assert pipeline.snapshot is loaded
    records = [
        record
        for record in caplog.records
        if record.name == "services.pipeline" and record.levelno >= logging.ERROR
    ]
    assert len(records) == 1
    assert getattr(records[0], "load_seq", None) == 2
    assert records[0].exc_info is not None


def test_first_load_failure_leaves_empty_state(tmp_path) -> None:
    pipeline = DashboardPipeline(source=FileTelemetrySource(tmp_path / "missing.csv"))

    with pytest.raises(DataLoadError) as excinfo:
        asyncio.run(pipeline.reload())

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert pipeline.snapshot.is_loaded is False
    assert len(pipeline.snapshot.dataset) == 0


def test_undecodable_bytes_fail_the_load(tmp_path) -> None:
    path = tmp_path / "battery.csv"
    path.write_bytes(b"time,voltage\n\xff\xfe\xfa,1\n")
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))

    with pytest.raises(DataLoadError):
        asyncio.run(pipeline.reload())


def test_oversized_and_quoted_cells_still_load(tmp_path) -> None:
    label = "t" * 200_000
    path = _write_csv(
        tmp_path / "battery.csv",
        f'time,voltage,current,power\n"q,1",3.9,7,27\n{label},3.8,7.1,27.0\n',
    )
    pipeline = DashboardPipeline(source=FileTelemetrySource(path))

    outcome = asyncio.run(pipeline.reload())

    assert outcome.applied is True
    assert outcome.snapshot.dataset.time == ('"q', label)
    assert outcome.snapshot.summary.row_count == 2


def test_http_error_fails_the_load() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    source = HttpTelemetrySource("http://example.test/data.csv", transport=transport)
    pipeline = DashboardPipeline(source=source)

    with pytest.raises(DataLoadError) as excinfo:
        asyncio.run(pipeline.reload())

    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


def test_superseded_load_is_discarded(caplog) -> None:
    older_body = b"time,voltage,current,power\nold,3.4,1.0,3.4\n"
    newer_body = b"time,voltage,current,power\nnew,3.9,7.0,27.3\n"
    source = GatedSource([older_body, newer_body])
    pipeline = DashboardPipeline(source=source)

    async def scenario():
        older_task = asyncio.create_task(pipeline.reload())
        await _wait_for_calls(source, 1)
        newer_task = asyncio.create_task(pipeline.reload())
        await _wait_for_calls(source, 2)

        source.gates[1].set()
        newer = await newer_task
        source.gates[0].set()
        older = await older_task
        return older, newer

    with caplog.at_level(logging.INFO, logger="services.pipeline"):
        older, newer = asyncio.run(scenario())

    assert newer.sequence == 2 and newer.applied is True
    assert older.sequence == 1 and older.applied is False
    assert older.snapshot is newer.snapshot
    assert pipeline.snapshot.dataset.time == ("new",)
    assert pipeline.snapshot.raw == newer_body
    assert any("superseded" in record.getMessage() for record in caplog.records)


def test_stale_completion_does_not_apply_even_if_newer_is_pending() -> None:
    source = GatedSource(
        [
            b"time,voltage,current,power\nold,3.9,7.0,27.3\n",
            b"time,voltage,current,power\nnew,3.8,7.0,27.0\n",
        ]
    )
    pipeline = DashboardPipeline(source=source)

    async def scenario():
        older_task = asyncio.create_task(pipeline.reload())
        await _wait_for_calls(source, 1)
        newer_task = asyncio.create_task(pipeline.reload())
        await _wait_for_calls(source, 2)

        source.gates[0].set()
        older = await older_task
        assert pipeline.snapshot.is_loaded is False
        source.gates[1].set()
        await newer_task
        return older

    older = asyncio.run(scenario())

    assert older.applied is False
    assert pipeline.snapshot.sequence == 2
