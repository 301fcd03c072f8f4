"""Constants for the tool metrics pipeline."""

# Local store layout (shared with the dashboard, keep names stable)
METRICS_DIR = ".ai-mesh/metrics"
TOOL_METRICS_FILE = "tool-metrics.jsonl"
REALTIME_DIR = "realtime"
ACTIVITY_LOG_FILE = "activity.log"
INDICATORS_FILE = "productivity-indicators.json"
SESSION_ID_FILE = ".current-session-id"
DASHBOARD_SIGNAL_FILE = ".dashboard-active"
REALTIME_LOG_FILE = "realtime.log"

# Environment variables
SESSION_ID_ENV = "CLAUDE_SESSION_ID"
USER_ENV = "USER"
METRICS_DIR_ENV = "AI_MESH_METRICS_DIR"
API_URL_ENV = "AI_MESH_METRICS_API_URL"
API_KEY_ENV = "AI_MESH_METRICS_API_KEY"
API_TIMEOUT_ENV = "AI_MESH_METRICS_API_TIMEOUT"
BUDGET_MS_ENV = "AI_MESH_METRICS_BUDGET_MS"

DEFAULT_SESSION_ID = "default-session"
DEFAULT_USER = "unknown"
UNKNOWN_TOOL = "unknown"

# Remote metrics API
TOOL_METRICS_PATH = "/api/v1/metrics/tool-usage"
DEFAULT_API_TIMEOUT = 2.0  # seconds; falls back to local storage afterwards

# Event types
EVENT_TOOL_EXECUTION = "tool_execution"
EVENT_AGENT_INVOCATION = "agent_invocation"

# Sink methods
METHOD_REMOTE = "remote"
METHOD_LOCAL_FALLBACK = "local_fallback"

# Tools that count toward files_modified
FILE_MUTATING_TOOLS = frozenset({"Edit", "Write"})

# Performance targets for a single hook run
PERFORMANCE_BUDGET_MS = 30.0
MEMORY_BUDGET_MB = 20.0
