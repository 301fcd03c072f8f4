"""Aggregation and reporting helpers over the local metrics store.

All functions operate on plain dicts read from JSONL.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any

from meshmetrics.constants import EVENT_AGENT_INVOCATION, EVENT_TOOL_EXECUTION
from meshmetrics.metrics.collector import LocalMetricsStore
from meshmetrics.metrics.indicators import IndicatorsStore


# ---------------------------------------------------------------------------
# Filtering helpers
# ---------------------------------------------------------------------------


def _parse_ts(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value).astimezone()
    except ValueError:
        return None


def _since(events: list[dict], hours: float) -> list[dict]:
    """Return events from the last *hours* hours."""
    cutoff = datetime.now().astimezone() - timedelta(hours=hours)
    selected = []
    for e in events:
        ts = _parse_ts(e.get("timestamp"))
        if ts is not None and ts >= cutoff:
            selected.append(e)
    return selected


# ---------------------------------------------------------------------------
# Summary report
# ---------------------------------------------------------------------------


def summary_report(store: LocalMetricsStore, hours: float = 24) -> dict[str, Any]:
    """High-level summary over the last *hours* hours."""
    events = _since(store.read_events(), hours)
    tool_events = [e for e in events if e.get("event_type") == EVENT_TOOL_EXECUTION]
    agent_events = [e for e in events if e.get("event_type") == EVENT_AGENT_INVOCATION]

    total = len(tool_events)
    ok = sum(1 for e in tool_events if e.get("success"))
    sessions = {e.get("session_id") for e in tool_events if e.get("session_id")}
    avg_time = sum(e.get("execution_time_ms", 0) for e in tool_events) // max(total, 1)

    return {
        "period_hours": hours,
        "tool_calls": total,
        "success_rate": round(ok / total * 100, 1) if total else 0.0,
        "avg_execution_time_ms": avg_time,
        "sessions": len(sessions),
        "agent_invocations": len(agent_events),
        "agents": dict(Counter(e.get("agent_name", "?") for e in agent_events)),
    }


# ---------------------------------------------------------------------------
# Per-tool breakdown
# ---------------------------------------------------------------------------


def tool_report(store: LocalMetricsStore, hours: float = 24) -> list[dict[str, Any]]:
    """Per-tool success rate, avg execution time, and call count."""
    events = _since(store.read_events(), hours)
    by_tool: dict[str, list[dict]] = defaultdict(list)
    for e in events:
        if e.get("event_type") == EVENT_TOOL_EXECUTION:
            by_tool[e.get("tool_name", "?")].append(e)

    rows: list[dict[str, Any]] = []
    for name, evts in sorted(by_tool.items(), key=lambda kv: -len(kv[1])):
        total = len(evts)
        ok = sum(1 for e in evts if e.get("success"))
        avg_time = sum(e.get("execution_time_ms", 0) for e in evts) // max(total, 1)
        errors = Counter(
            str(e.get("error_message", ""))[:120] for e in evts if e.get("error_message")
        )

        rows.append(
            {
                "tool": name,
                "calls": total,
                "success_rate": round(ok / total * 100, 1) if total else 0.0,
                "avg_execution_time_ms": avg_time,
                "top_errors": dict(errors.most_common(3)),
            }
        )
    return rows


# ---------------------------------------------------------------------------
# Current indicators
# ---------------------------------------------------------------------------


def indicators_report(store: IndicatorsStore) -> dict[str, Any] | None:
    """The stored indicators document, or None if nothing was recorded yet."""
    indicators = store.load()
    return indicators.to_dict() if indicators is not None else None
