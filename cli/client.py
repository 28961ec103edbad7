from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(
        self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url, timeout=config.timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def get_dashboard(self) -> Dict[str, Any]:
        return self._request("GET", "/dashboard").json()

    def reload(self) -> Dict[str, Any]:
        return self._request("POST", "/dashboard/reload").json()

    def download(self) -> bytes:
        return self._request("GET", "/dataset/download").content

    def _request(self, method: str, path: str) -> httpx.Response:
        try:
            response = self._client.request(method, path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
