"""Data models for tool metrics events and reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any

from meshmetrics.constants import EVENT_AGENT_INVOCATION, EVENT_TOOL_EXECUTION


@dataclass
class EventContext:
    """Normalized description of one tool invocation."""

    tool_name: str
    tool_input: dict[str, Any]
    error: Any
    timestamp: str
    environment: dict[str, str] = field(default_factory=dict)


@dataclass
class ToolEvent:
    """A ``tool_execution`` record.

    ``details`` holds the tool-specific fields from the extractor; they are
    flattened into the record next to the base fields.
    """

    timestamp: str
    tool_name: str
    success: bool
    execution_time_ms: int
    user: str
    session_id: str
    details: dict[str, Any] = field(default_factory=dict)
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "event_type": EVENT_TOOL_EXECUTION,
            "timestamp": self.timestamp,
            "tool_name": self.tool_name,
            "success": self.success,
            "execution_time_ms": self.execution_time_ms,
            "user": self.user,
            "session_id": self.session_id,
        }
        data.update(self.details)
        if self.error_message is not None:
            data["error"] = True
            data["error_message"] = self.error_message
        return data


@dataclass
class AgentEvent:
    """An ``agent_invocation`` record emitted for delegated Task calls."""

    timestamp: str
    agent_name: str
    task_description: str
    success: bool
    execution_time_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"event_type": EVENT_AGENT_INVOCATION, **asdict(self)}


@dataclass
class SinkOutcome:
    """Result of recording one event."""

    success: bool
    method: str
    message: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ProductivityIndicators:
    """Running productivity summary read by the dashboard."""

    session_start: str
    commands_executed: int = 0
    tools_used: dict[str, int] = field(default_factory=dict)
    files_modified: int = 0
    lines_changed: int = 0
    agents_invoked: dict[str, int] = field(default_factory=dict)
    success_rate: float = 100.0
    last_activity: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProductivityIndicators:
        valid_keys = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in valid_keys and v is not None}
        values.setdefault("session_start", "")
        # Mapping fields may be missing or nulled out in hand-edited files
        values["tools_used"] = dict(values.get("tools_used") or {})
        values["agents_invoked"] = dict(values.get("agents_invoked") or {})
        if "last_activity" in data:
            values["last_activity"] = data["last_activity"]
        return cls(**values)


@dataclass
class MetricsSummary:
    tool_name: str
    successful: bool
    metrics_logged: bool
    api_method: str
    api_message: str | None = None


@dataclass
class ExecutionReport:
    """What a single hook run reports back to its caller."""

    success: bool
    execution_time_ms: float
    memory_usage_bytes: int | None = None
    metrics: MetricsSummary | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}
