"""PostToolUse hook: capture tool usage, performance and productivity metrics.

One call to ``ToolMetricsHook.handle`` processes one tool invocation:

    raw payload -> context -> event record (+ agent event for Task)
        -> sink (remote API, local JSONL fallback)
        -> productivity indicators
        -> ExecutionReport

The hook never raises; failures come back as a failed report.
"""

from __future__ import annotations

import asyncio
import math
import os
import time
import tracemalloc
from collections.abc import Mapping
from typing import Any

from loguru import logger

from meshmetrics.api.client import MetricsApiClient
from meshmetrics.config import MetricsSettings
from meshmetrics.constants import DEFAULT_USER, USER_ENV
from meshmetrics.metrics.collector import LocalMetricsStore
from meshmetrics.metrics.context import build_context
from meshmetrics.metrics.extractors import ToolKind, extract_metrics
from meshmetrics.metrics.indicators import JsonIndicatorsStore, ProductivityAggregator
from meshmetrics.metrics.models import (
    AgentEvent,
    ExecutionReport,
    MetricsSummary,
    ToolEvent,
)
from meshmetrics.metrics.sink import MetricsSink
from meshmetrics.session import resolve_session_id
from meshmetrics.utils.helpers import now_iso


def _execution_time_ms(raw: Any) -> int:
    """Measured tool execution time, rounded half-up to whole milliseconds."""
    if not isinstance(raw, Mapping):
        return 0
    value = raw.get("execution_time", raw.get("executionTime", 0))
    try:
        ms = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(ms) or ms < 0:
        return 0
    return int(math.floor(ms + 0.5))


class ToolMetricsHook:
    """Sequences the metrics pipeline for single tool invocations."""

    def __init__(
        self,
        sink: MetricsSink,
        aggregator: ProductivityAggregator,
        settings: MetricsSettings | None = None,
        environ: Mapping[str, str] | None = None,
        api_client: MetricsApiClient | None = None,
    ):
        self._sink = sink
        self._aggregator = aggregator
        self._settings = settings or MetricsSettings()
        self._environ = os.environ if environ is None else environ
        self._api_client = api_client

    @classmethod
    def from_settings(
        cls,
        settings: MetricsSettings,
        environ: Mapping[str, str] | None = None,
    ) -> ToolMetricsHook:
        """Wire the production components for *settings*."""
        api_client = MetricsApiClient.from_settings(settings) if settings.remote_enabled else None
        store = LocalMetricsStore(settings.metrics_dir)
        aggregator = ProductivityAggregator(
            JsonIndicatorsStore(settings.metrics_dir),
            metrics_dir=settings.metrics_dir,
        )
        return cls(
            sink=MetricsSink(store, remote=api_client),
            aggregator=aggregator,
            settings=settings,
            environ=environ,
            api_client=api_client,
        )

    async def close(self) -> None:
        if self._api_client is not None:
            await self._api_client.close()

    async def handle(self, raw: Any) -> ExecutionReport:
        started_tracing = not tracemalloc.is_tracing()
        if started_tracing:
            tracemalloc.start()
            baseline_bytes = 0
        else:
            tracemalloc.reset_peak()
            baseline_bytes, _ = tracemalloc.get_traced_memory()
        start = time.perf_counter()

        try:
            summary = await self._process(raw)
            elapsed_ms = (time.perf_counter() - start) * 1000
            _, peak_bytes = tracemalloc.get_traced_memory()
            peak_bytes = max(0, peak_bytes - baseline_bytes)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.exception("Tool metrics hook failed")
            return ExecutionReport(
                success=False,
                execution_time_ms=round(elapsed_ms, 2),
                error_message=str(e) or type(e).__name__,
            )
        finally:
            if started_tracing:
                tracemalloc.stop()

        self._check_budget(elapsed_ms, peak_bytes)
        return ExecutionReport(
            success=True,
            execution_time_ms=round(elapsed_ms, 2),
            memory_usage_bytes=peak_bytes,
            metrics=summary,
        )

    async def _process(self, raw: Any) -> MetricsSummary:
        context = build_context(raw)
        timestamp = now_iso()
        session_id = await asyncio.to_thread(
            resolve_session_id, self._settings.metrics_dir, self._environ
        )
        success = not context.error
        execution_time_ms = _execution_time_ms(raw)

        details = await asyncio.to_thread(extract_metrics, context)
        event = ToolEvent(
            timestamp=timestamp,
            tool_name=context.tool_name,
            success=success,
            execution_time_ms=execution_time_ms,
            user=self._environ.get(USER_ENV) or DEFAULT_USER,
            session_id=session_id,
            details=details,
            error_message=str(context.error) if context.error else None,
        )

        if ToolKind.from_name(context.tool_name) is ToolKind.TASK:
            agent_event = AgentEvent(
                timestamp=timestamp,
                agent_name=details.get("subagent_type", "unknown"),
                task_description=details.get("task_description", ""),
                success=success,
                execution_time_ms=execution_time_ms,
            )
            await self._sink.record(agent_event.to_dict())

        record = event.to_dict()
        outcome = await self._sink.record(record)
        await self._aggregator.update(record)

        return MetricsSummary(
            tool_name=context.tool_name,
            successful=success,
            metrics_logged=outcome.success,
            api_method=outcome.method,
            api_message=outcome.message,
        )

    def _check_budget(self, elapsed_ms: float, peak_bytes: int) -> None:
        budget_ms = self._settings.performance_budget_ms
        if elapsed_ms > budget_ms:
            logger.warning(
                f"[Performance] Tool metrics took {elapsed_ms:.2f}ms (target: ≤{budget_ms:g}ms)"
            )
        peak_mb = peak_bytes / 1024 / 1024
        if peak_mb > self._settings.memory_budget_mb:
            logger.warning(
                f"[Performance] Memory usage: {peak_mb:.1f}MB "
                f"(target: ≤{self._settings.memory_budget_mb:g}MB)"
            )


async def handle_tool_invocation(
    raw: Any,
    settings: MetricsSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> ExecutionReport:
    """Run the hook once with production wiring and release its resources."""
    hook = ToolMetricsHook.from_settings(settings or MetricsSettings.from_env(environ), environ)
    try:
        return await hook.handle(raw)
    finally:
        await hook.close()
