"""Assistant hook entry points."""

from meshmetrics.hooks.tool_metrics import ToolMetricsHook, handle_tool_invocation

__all__ = ["ToolMetricsHook", "handle_tool_invocation"]
