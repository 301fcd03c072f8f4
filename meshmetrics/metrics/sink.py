"""Remote-first event sink with local fallback."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from loguru import logger

from meshmetrics.constants import METHOD_LOCAL_FALLBACK, METHOD_REMOTE
from meshmetrics.errors import RemoteUnavailableError
from meshmetrics.metrics.collector import LocalMetricsStore
from meshmetrics.metrics.models import SinkOutcome


class RemoteSubmitter(Protocol):
    async def submit_tool_metrics(self, record: dict[str, Any]) -> Any: ...


class MetricsSink:
    """Records events: remote API first, local JSONL store on any failure.

    ``record`` never raises; every failure ends up in the returned
    ``SinkOutcome``. Retried calls write duplicate lines (at-least-once).
    """

    def __init__(self, store: LocalMetricsStore, remote: RemoteSubmitter | None = None):
        self._store = store
        self._remote = remote

    async def record(self, event: dict[str, Any]) -> SinkOutcome:
        remote_error = await self._submit_remote(event)
        if remote_error is None:
            return SinkOutcome(
                success=True,
                method=METHOD_REMOTE,
                message="Metrics submitted to API",
            )

        try:
            await asyncio.to_thread(self._store.append_event, event)
        except Exception as e:
            logger.warning(f"Metrics API and local storage both failed: {e}")
            return SinkOutcome(
                success=False,
                method=METHOD_LOCAL_FALLBACK,
                message="Both API and local storage failed",
                error=str(e),
            )

        return SinkOutcome(
            success=True,
            method=METHOD_LOCAL_FALLBACK,
            message="API unavailable, data stored locally",
            error=remote_error,
        )

    async def _submit_remote(self, event: dict[str, Any]) -> str | None:
        """Return None on success, else a description of the failure."""
        if self._remote is None:
            return "Metrics API not configured"
        try:
            await self._remote.submit_tool_metrics(event)
        except RemoteUnavailableError as e:
            return str(e)
        except Exception as e:
            logger.warning(f"Metrics API submission failed, using local fallback: {e!r}")
            return str(e) or type(e).__name__
        return None
