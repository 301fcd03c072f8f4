"""Tool metrics collection, storage and productivity indicators.

Architecture:
    PostToolUse hook payload
            |
            v
    context -> extractors -> event record
            |
            v
    sink: remote metrics API, else tool-metrics.jsonl + realtime/activity.log
            |
            v
    productivity-indicators.json (+ realtime.log while the dashboard is open)
"""

from meshmetrics.metrics.collector import LocalMetricsStore
from meshmetrics.metrics.context import build_context
from meshmetrics.metrics.extractors import ToolKind, count_lines, extract_metrics
from meshmetrics.metrics.indicators import (
    IndicatorsStore,
    JsonIndicatorsStore,
    ProductivityAggregator,
    apply_event,
)
from meshmetrics.metrics.models import (
    AgentEvent,
    EventContext,
    ExecutionReport,
    MetricsSummary,
    ProductivityIndicators,
    SinkOutcome,
    ToolEvent,
)
from meshmetrics.metrics.sink import MetricsSink

__all__ = [
    # Events
    "AgentEvent",
    "EventContext",
    "ToolEvent",
    "ToolKind",
    "build_context",
    "count_lines",
    "extract_metrics",
    # Recording
    "LocalMetricsStore",
    "MetricsSink",
    "SinkOutcome",
    # Indicators
    "IndicatorsStore",
    "JsonIndicatorsStore",
    "ProductivityAggregator",
    "ProductivityIndicators",
    "apply_event",
    # Reports
    "ExecutionReport",
    "MetricsSummary",
]
