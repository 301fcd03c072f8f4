"""Tests for the reporting helpers."""

from datetime import datetime, timedelta

from meshmetrics.metrics.collector import LocalMetricsStore
from meshmetrics.metrics.indicators import JsonIndicatorsStore
from meshmetrics.metrics.models import ProductivityIndicators
from meshmetrics.metrics.report import indicators_report, summary_report, tool_report


def _ts(hours_ago: float = 0) -> str:
    return (datetime.now().astimezone() - timedelta(hours=hours_ago)).isoformat(timespec="seconds")


def _store(metrics_dir) -> LocalMetricsStore:
    store = LocalMetricsStore(metrics_dir)
    events = [
        {"event_type": "tool_execution", "timestamp": _ts(1), "tool_name": "Read",
         "success": True, "execution_time_ms": 20, "session_id": "a"},
        {"event_type": "tool_execution", "timestamp": _ts(2), "tool_name": "Read",
         "success": True, "execution_time_ms": 40, "session_id": "a"},
        {"event_type": "tool_execution", "timestamp": _ts(3), "tool_name": "Bash",
         "success": False, "execution_time_ms": 90, "session_id": "b",
         "error": True, "error_message": "exit 1"},
        {"event_type": "agent_invocation", "timestamp": _ts(3), "agent_name": "code-reviewer",
         "task_description": "Review", "success": True, "execution_time_ms": 90},
        {"event_type": "tool_execution", "timestamp": _ts(48), "tool_name": "Edit",
         "success": True, "execution_time_ms": 10, "session_id": "old"},
    ]
    for event in events:
        store.append_event(event)
    return store


def test_summary_report(metrics_dir):
    report = summary_report(_store(metrics_dir), hours=24)

    assert report["tool_calls"] == 3
    assert report["success_rate"] == 66.7
    assert report["avg_execution_time_ms"] == 50
    assert report["sessions"] == 2
    assert report["agent_invocations"] == 1
    assert report["agents"] == {"code-reviewer": 1}


def test_summary_report_empty(metrics_dir):
    report = summary_report(LocalMetricsStore(metrics_dir))

    assert report["tool_calls"] == 0
    assert report["success_rate"] == 0.0


def test_tool_report(metrics_dir):
    rows = tool_report(_store(metrics_dir), hours=24)

    assert [r["tool"] for r in rows] == ["Read", "Bash"]
    read, bash = rows
    assert read["calls"] == 2
    assert read["success_rate"] == 100.0
    assert read["avg_execution_time_ms"] == 30
    assert bash["success_rate"] == 0.0
    assert bash["top_errors"] == {"exit 1": 1}


def test_tool_report_window_includes_old_events(metrics_dir):
    rows = tool_report(_store(metrics_dir), hours=72)

    assert {r["tool"] for r in rows} == {"Read", "Bash", "Edit"}


def test_indicators_report(metrics_dir):
    store = JsonIndicatorsStore(metrics_dir)
    assert indicators_report(store) is None

    store.save(ProductivityIndicators(session_start="s", commands_executed=3))

    assert indicators_report(store)["commands_executed"] == 3
