"""JSONL-based local metrics store.

Writes event records to append-only files under ~/.ai-mesh/metrics/. This is
the fallback path of the sink and the data source of the report helpers.
Appends are not locked; concurrent hook processes rely on O_APPEND writes.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from meshmetrics.config import default_metrics_dir
from meshmetrics.constants import (
    ACTIVITY_LOG_FILE,
    REALTIME_DIR,
    TOOL_METRICS_FILE,
    UNKNOWN_TOOL,
)
from meshmetrics.utils.helpers import ensure_dir, now_iso


class LocalMetricsStore:
    """Append-only local event storage.

    Files:
        tool-metrics.jsonl      one JSON event record per line
        realtime/activity.log   ``timestamp|tool_complete|tool|status`` lines
    """

    def __init__(self, metrics_dir: Path | None = None):
        self._dir = metrics_dir or default_metrics_dir()
        self._events_path = self._dir / TOOL_METRICS_FILE
        self._activity_path = self._dir / REALTIME_DIR / ACTIVITY_LOG_FILE

    # -- writing (sink fallback) ---------------------------------------------

    def append_event(self, record: dict[str, Any]) -> None:
        """Append *record* to the event log and the activity log.

        Raises:
            OSError: If either file cannot be written.
        """
        ensure_dir(self._dir)
        with open(self._events_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")

        ensure_dir(self._activity_path.parent)
        with open(self._activity_path, "a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(self.activity_line(record) + "\n")

    @staticmethod
    def activity_line(record: dict[str, Any]) -> str:
        timestamp = record.get("timestamp") or now_iso()
        tool_name = record.get("tool_name") or UNKNOWN_TOOL
        status = record.get("status") or "unknown"
        return f"{timestamp}|tool_complete|{tool_name}|{status}"

    # -- reading (used by report.py) -----------------------------------------

    def read_events(self, limit: int = 0) -> list[dict]:
        return self._read(self._events_path, limit)

    def read_activity(self, limit: int = 0) -> list[str]:
        if not self._activity_path.exists():
            return []
        try:
            text = self._activity_path.read_text(encoding="utf-8")
            lines = [line for line in text.splitlines() if line.strip()]
        except OSError as e:
            logger.warning(f"Metrics read failed ({self._activity_path.name}): {e}")
            return []
        if limit > 0:
            lines = lines[-limit:]
        return lines

    @property
    def metrics_dir(self) -> Path:
        return self._dir

    @property
    def events_path(self) -> Path:
        return self._events_path

    @property
    def activity_path(self) -> Path:
        return self._activity_path

    # -- internals -----------------------------------------------------------

    @staticmethod
    def _read(path: Path, limit: int = 0) -> list[dict]:
        if not path.exists():
            return []
        lines: list[dict] = []
        try:
            with open(path, encoding="utf-8") as f:
                for raw in f:
                    raw = raw.strip()
                    if not raw:
                        continue
                    try:
                        lines.append(json.loads(raw))
                    except json.JSONDecodeError:
                        logger.debug(f"Skipping malformed metrics line in {path.name}")
        except OSError as e:
            logger.warning(f"Metrics read failed ({path.name}): {e}")
        if limit > 0:
            lines = lines[-limit:]
        return lines
