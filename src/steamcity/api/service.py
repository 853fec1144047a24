"""ApiService - async HTTP client for the SteamCity REST API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, urlencode

import httpx

from steamcity.exceptions import ApiError
from steamcity.logger import logger

# Default timeout for HTTP requests in seconds
_DEFAULT_TIMEOUT = 30.0


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None}


class ApiService:
    """HTTP client for the SteamCity API.

    Every ``fetch_*`` method returns parsed JSON. Responses wrapped as
    ``{"success": ..., "data": ...}`` are unwrapped to ``data``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:3000/api")
            timeout: Request timeout in seconds
            transport: Optional transport, used by tests to serve canned responses
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def _fetch(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Issue a GET request and return the decoded payload.

        Args:
            endpoint: Endpoint path relative to the base URL
            params: Optional query parameters; None values are dropped

        Raises:
            ApiError: On network failure, non-2xx status or invalid JSON
        """
        try:
            response = await self.client.get(endpoint, params=_clean_params(params) or None)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("API error [%s]: HTTP %s", endpoint, status)
            raise ApiError(f"HTTP Error {status}: {e.response.reason_phrase}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error("API error [%s]: %s", endpoint, e)
            raise ApiError(f"Request failed: {e}") from e
        except ValueError as e:
            logger.error("API error [%s]: invalid JSON", endpoint)
            raise ApiError(f"Invalid JSON response from {endpoint}") from e

        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    async def fetch_experiments(self) -> list[dict[str, Any]]:
        """Fetch all experiments."""
        return await self._fetch("/experiments")

    async def fetch_experiment_by_id(self, experiment_id: str) -> dict[str, Any]:
        """Fetch one experiment."""
        return await self._fetch(f"/experiments/{quote(experiment_id, safe='')}")

    async def fetch_sensors(self, **params: Any) -> list[dict[str, Any]]:
        """Fetch raw sensor readings (legacy endpoint)."""
        return await self._fetch("/sensors", params)

    async def fetch_sensor_devices(self, **params: Any) -> list[dict[str, Any]]:
        """Fetch sensor devices, optionally filtered (experimentId, type, ...)."""
        return await self._fetch("/sensors/devices", params)

    async def fetch_sensor_by_id(self, sensor_id: str) -> dict[str, Any]:
        """Fetch one sensor device."""
        return await self._fetch(f"/sensors/devices/{quote(sensor_id, safe='')}")

    async def fetch_sensor_types(self) -> list[dict[str, Any]]:
        """Fetch the available sensor types."""
        return await self._fetch("/sensors/types")

    async def fetch_measurements(self, **params: Any) -> list[dict[str, Any]]:
        """Fetch measurements.

        Keyword Args:
            experimentId: Experiment id
            sensorId: Sensor id
            period: 24h, 7d, 30d or all
            limit: Maximum number of results
            from: ISO start date (pass as ``**{"from": ...}``)
            to: ISO end date
        """
        return await self._fetch("/sensors/measurements", params)

    async def fetch_protocols(self) -> list[dict[str, Any]]:
        """Fetch the research protocols."""
        return await self._fetch("/protocols")

    async def health_check(self) -> dict[str, Any]:
        """Fetch the API health status."""
        return await self._fetch("/health")

    def build_url(self, endpoint: str, params: dict[str, Any] | None = None) -> str:
        """Build an endpoint path with a query string, dropping None values."""
        query = urlencode(_clean_params(params))
        return f"{endpoint}?{query}" if query else endpoint

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ApiService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
