from __future__ import annotations

from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol
from urllib.parse import urlparse

import httpx

from settings import get_settings


class TelemetrySource(Protocol):
    """Where the dashboard's CSV comes from."""

    location: str

    @property
    def filename(self) -> str: ...

    def read_bytes(self) -> bytes: ...


class FileTelemetrySource:

    def __init__(self, path: Path) -> None:
        self.path = path
        self.location = str(path)

    @property
    def filename(self) -> str:
        return self.path.name

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class HttpTelemetrySource:
    """Fetches the CSV over HTTP, one request per read."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.location = url
        self.timeout = timeout
        self._transport = transport

    @property
    def filename(self) -> str:
        name = PurePosixPath(urlparse(self.location).path).name
        return name or "telemetry.csv"

    def read_bytes(self) -> bytes:
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.get(self.location)
            response.raise_for_status()
            return response.content


def source_for(location: str, timeout: float = 10.0) -> TelemetrySource:
    if urlparse(location).scheme in {"http", "https"}:
        return HttpTelemetrySource(location, timeout=timeout)
    return FileTelemetrySource(Path(location))


@lru_cache
def build_default_source(location: Optional[str] = None) -> TelemetrySource:
    settings = get_settings()
    target = settings.data_source if location is None else location
    return source_for(target, timeout=settings.fetch_timeout)
