from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )

    def profile(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/profile", authenticated=True)

    def list_readings(self, page: int, limit: int) -> Dict[str, Any]:
        return self._request("GET", "/api/readings", params={"page": page, "limit": limit})

    def latest_reading(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/api/readings/latest")

    def create_reading(
        self, temperature: float, threshold_value: Optional[float] = None
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/readings",
            json={"temperature": temperature, "threshold_value": threshold_value},
        )

    def list_thresholds(self, page: int, limit: int) -> Dict[str, Any]:
        return self._request(
            "GET", "/api/thresholds", params={"page": page, "limit": limit}
        )

    def latest_threshold(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/api/thresholds/latest")

    def create_threshold(self, threshold_value: float) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/thresholds",
            json={"threshold_value": threshold_value},
            authenticated=True,
        )

    def _request(
        self,
        method: str,
        path: str,
        authenticated: bool = False,
        **kwargs: Any,
    ) -> Any:
        headers = {}
        if authenticated:
            if not self._config.token:
                raise typer.BadParameter(
                    "This command needs a token; pass --token or set API_TOKEN."
                )
            headers["Authorization"] = f"Bearer {self._config.token}"
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
