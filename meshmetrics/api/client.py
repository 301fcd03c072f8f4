"""HTTP client for the remote metrics API."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from meshmetrics import __version__
from meshmetrics.config import MetricsSettings
from meshmetrics.constants import DEFAULT_API_TIMEOUT, TOOL_METRICS_PATH
from meshmetrics.errors import RemoteUnavailableError


class MetricsApiClient:
    """Submits event records to the metrics backend.

    A single attempt per call: no retries, the sink falls back to local
    storage on any error. Requests are bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_API_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: MetricsSettings) -> MetricsApiClient:
        return cls(
            base_url=settings.api_url,
            api_key=settings.api_key,
            timeout=settings.api_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    # ── HTTP client ────────────────────────────────────────────────────

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"meshmetrics/{__version__}",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    # ── Submission ─────────────────────────────────────────────────────

    async def submit_tool_metrics(self, record: dict[str, Any]) -> dict[str, Any]:
        """POST one event record.

        Returns:
            The decoded JSON acknowledgement, or an empty dict for empty bodies.

        Raises:
            RemoteUnavailableError: If no base URL is configured.
            httpx.HTTPStatusError: On a non-2xx response.
            httpx.HTTPError: On network errors and timeouts.
        """
        if not self.is_configured:
            raise RemoteUnavailableError("Metrics API URL not configured")

        client = await self._get_client()
        url = f"{self._base_url}{TOOL_METRICS_PATH}"
        response = await client.post(url, json=record, headers=self._headers())
        response.raise_for_status()
        logger.debug("Submitted {} event to {}", record.get("event_type", "?"), url)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}
