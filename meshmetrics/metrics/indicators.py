"""Productivity indicators: a running summary updated once per tool event.

The document lives in ``productivity-indicators.json`` and is rewritten after
every event. There is no locking; two hooks finishing at the same moment can
read the same base state and one of the updates is lost.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from meshmetrics.constants import (
    DASHBOARD_SIGNAL_FILE,
    FILE_MUTATING_TOOLS,
    INDICATORS_FILE,
    REALTIME_LOG_FILE,
    UNKNOWN_TOOL,
)
from meshmetrics.metrics.models import ProductivityIndicators
from meshmetrics.utils.helpers import ensure_dir, now_iso


class IndicatorsStore(Protocol):
    def load(self) -> ProductivityIndicators | None: ...

    def save(self, indicators: ProductivityIndicators) -> None: ...


class JsonIndicatorsStore:
    """Indicators persisted as a single JSON document."""

    def __init__(self, metrics_dir: Path):
        self._dir = metrics_dir
        self.path = metrics_dir / INDICATORS_FILE

    def load(self) -> ProductivityIndicators | None:
        if not self.path.exists():
            return None
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path.name} does not contain a JSON object")
        return ProductivityIndicators.from_dict(data)

    def save(self, indicators: ProductivityIndicators) -> None:
        ensure_dir(self._dir)
        self.path.write_text(
            json.dumps(indicators.to_dict(), indent=2) + "\n",
            encoding="utf-8",
        )


def new_indicators() -> ProductivityIndicators:
    return ProductivityIndicators(session_start=now_iso())


def apply_event(indicators: ProductivityIndicators, event: dict[str, Any]) -> ProductivityIndicators:
    """Fold one event record into *indicators* (in place) and return it.

    The success rate is a decaying penalty, not successes/total: each failure
    subtracts ``1 / commands_executed`` (counted after this event) and
    successes leave it untouched, so it never recovers.
    """
    indicators.commands_executed += 1
    indicators.last_activity = event.get("timestamp")

    tool_name = event.get("tool_name") or UNKNOWN_TOOL
    indicators.tools_used[tool_name] = indicators.tools_used.get(tool_name, 0) + 1

    if tool_name in FILE_MUTATING_TOOLS and "file_path" in event:
        indicators.files_modified += 1

    if "net_lines" in event:
        indicators.lines_changed += abs(int(event["net_lines"]))
    elif "lines_written" in event:
        indicators.lines_changed += max(0, int(event["lines_written"]))

    agent = event.get("subagent_type")
    if agent:
        indicators.agents_invoked[agent] = indicators.agents_invoked.get(agent, 0) + 1

    if not event.get("success"):
        indicators.success_rate = max(
            0.0, indicators.success_rate - 1.0 / indicators.commands_executed
        )

    return indicators


class ProductivityAggregator:
    """Best-effort updater for the indicators document.

    Args:
        store: Where the document is loaded from and saved to.
        metrics_dir: Directory holding the dashboard signal and realtime log.
            None disables the dashboard notification.
    """

    def __init__(self, store: IndicatorsStore, metrics_dir: Path | None = None):
        self._store = store
        self._metrics_dir = metrics_dir

    async def update(self, event: dict[str, Any]) -> ProductivityIndicators | None:
        """Apply *event* and persist the result.

        Returns the updated document, or None if loading or saving failed.
        Failures are logged as warnings and never raised.
        """
        try:
            indicators = await asyncio.to_thread(self._store.load)
            if indicators is None:
                indicators = new_indicators()
            apply_event(indicators, event)
            await asyncio.to_thread(self._store.save, indicators)
        except Exception as e:
            logger.warning(f"Failed to update productivity indicators: {e}")
            return None

        await self._notify_dashboard(indicators, event.get("tool_name") or UNKNOWN_TOOL)
        return indicators

    async def _notify_dashboard(self, indicators: ProductivityIndicators, tool_name: str) -> None:
        if self._metrics_dir is None:
            return
        try:
            await asyncio.to_thread(self._append_realtime_line, indicators, tool_name)
        except Exception as e:
            logger.warning(f"Dashboard signal write failed: {e}")

    def _append_realtime_line(self, indicators: ProductivityIndicators, tool_name: str) -> None:
        if not (self._metrics_dir / DASHBOARD_SIGNAL_FILE).exists():
            return
        time_str = datetime.now().strftime("%H:%M:%S")
        line = (
            f"📊 [{time_str}] {tool_name} completed - Productivity: "
            f"{indicators.commands_executed} commands, {indicators.files_modified} files\n"
        )
        path = self._metrics_dir / REALTIME_LOG_FILE
        with open(path, "a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(line)
